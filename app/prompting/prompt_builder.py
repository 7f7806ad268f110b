"""Instruction templates and message assembly for the generation pipeline.

This module is intentionally narrow: it only builds `ChatMessage` sequences from
already validated inputs. Provider selection, model invocation, and reply parsing
happen in `app.core.engine`.

Design constraints:
    - Deterministic construction for identical inputs.
    - Fixed ordering: one `system` turn followed by one `user` turn.
    - No I/O and no global state mutation.

Prompt safety model:
    - The JSON reply contract is instruction-led, not enforced by the model API.
    - User text and the draft are interpolated inside double quotes as raw strings.
"""

from typing import List, Optional, Sequence

from app.core.contracts import AnsweredQuestion, ChatMessage


# =========================================================
# QUESTION GENERATION
# =========================================================
# Covers audience, purpose, output structure, tone, and context. Count guidance
# (3-4 simple, 5-7 complex) is not validated on the returned list.

QUESTIONS_SYSTEM_PROMPT = """Sen bir prompt mühendisliği uzmanısın. Kullanıcının verdiği prompt için, daha iyi bir prompt oluşturmak amacıyla 3-7 arasında önemli soru sor.

ÖNEMLI KURALLAR:
- Prompt basit ve açıksa 3-4 soru sor
- Prompt karmaşık ve detaylı ise 5-7 soru sor
- Sorular MUTLAKA şunları içermeli:
  * Hedef kitle (kimler için?)
  * Amaç ve kullanım alanı (ne için kullanılacak?)
  * ÇIKTI YAPISI (eğer metin: madde halinde mi, paragraf mı, liste mi? / eğer görsel: gerçekçi mi, çizim mi, sulu boya mı, dijital sanat mı?)
  * Ton ve stil (resmi mi, samimi mi, teknik mi?)
  * Bağlam ve özel gereksinimler

Soruları JSON formatında döndür:
{
  "questions": [
    {"id": "1", "question": "Soru metni burada"},
    {"id": "2", "question": "Soru metni burada"},
    ...
  ]
}"""


def build_questions_messages(user_prompt: str) -> List[ChatMessage]:
    """Build the single-call conversation for question generation."""
    return [
        ChatMessage(role="system", content=QUESTIONS_SYSTEM_PROMPT),
        ChatMessage(role="user", content=f'Kullanıcının promptu: "{user_prompt}"'),
    ]


# =========================================================
# ANSWERED-QUESTION CONTEXT
# =========================================================
# Appended verbatim to both stage system prompts in detailed mode.

CONTEXT_HEADER = "Kullanıcının verdiği ek bilgiler:"


def build_context_block(mode: str, questions: Optional[Sequence[AnsweredQuestion]]) -> str:
    """Render answered questions into the shared context block.

    Args:
        mode: Request mode (`quick` or `detailed`).
        questions: Answered questions in the order the user saw them.

    Returns:
        `"\\n\\n<header>\\n- <question>: <answer>..."`, or an empty string when
        `mode` is not `detailed` or no questions were supplied.
    """
    if mode != "detailed" or not questions:
        return ""

    lines = "\n".join(f"- {q.question}: {q.answer}" for q in questions)
    return f"\n\n{CONTEXT_HEADER}\n{lines}"


# =========================================================
# DRAFT STAGE
# =========================================================

DRAFT_SYSTEM_PROMPT = (
    "Sen bir prompt mühendisliği uzmanısın. Kullanıcının isteğine göre etkili, "
    "optimize edilmiş bir prompt taslağı oluştur. Prompt net, anlaşılır ve "
    "kullanıcının hedefine ulaşmasını sağlayacak şekilde olmalı."
)


def build_draft_messages(user_prompt: str, context_block: str = "") -> List[ChatMessage]:
    return [
        ChatMessage(role="system", content=DRAFT_SYSTEM_PROMPT + context_block),
        ChatMessage(role="user", content=f'Şu konu için prompt oluştur: "{user_prompt}"'),
    ]


# =========================================================
# OPTIMIZE STAGE
# =========================================================
# Component order: role/task text, context block, JSON reply contract.

OPTIMIZE_SYSTEM_PROMPT = (
    "Sen bir üst düzey prompt optimizasyon uzmanısın. Sana verilen taslak promptu "
    "analiz et ve iki farklı optimize edilmiş varyasyon oluştur. Her varyasyon "
    "benzersiz bir yaklaşım sunmalı ve profesyonel kalitede olmalı."
)

OPTIMIZE_REPLY_FORMAT = """

İki promptu şu JSON formatında döndür:
{
  "option1": "Birinci optimize prompt burada",
  "option2": "İkinci optimize prompt burada"
}"""


def build_optimize_messages(draft: str, context_block: str = "") -> List[ChatMessage]:
    """Build the optimize-stage conversation around the draft text.

    The draft is embedded in the user turn, so this can only be built once the
    draft stage has completed.
    """
    return [
        ChatMessage(
            role="system",
            content=OPTIMIZE_SYSTEM_PROMPT + context_block + OPTIMIZE_REPLY_FORMAT,
        ),
        ChatMessage(
            role="user",
            content=(
                f'Taslak prompt: "{draft}"\n\n'
                "Bu promptu optimize et ve iki farklı varyasyon oluştur."
            ),
        ),
    ]
