"""
Interactive terminal adapter for the prompt generation engine.

Architectural role:
- Provides the input -> mode -> questions -> results flow in a terminal.
- Delegates all model work to `app.core.engine`.

Interface responsibilities:
- Read provider selection and API keys from the environment.
- Collect a prompt idea, a mode, and (detailed mode) answers to the generated
  questions.
- Render both optimized options and the run metadata.

Request lifecycle (per prompt, CLI):
1. Read a prompt idea from stdin (`exit`/`quit` ends the session).
2. Read the mode (`quick` default, `detailed`).
3. Detailed mode: call `generate_questions`, then read one answer per question.
4. Call `generate_prompts` and print the result.

Environment:
- `AI1_PROVIDER` / `AI1_API_KEY`: questions and draft stage.
- `AI2_PROVIDER` / `AI2_API_KEY`: optimize stage (defaults to the AI1 values).
- `LOG_LEVEL`: logging level for the session (default `WARNING`).

Error handling strategy:
- Invalid configuration aborts startup with a message.
- Engine failures are printed and the loop continues with the next prompt.
- EOF and keyboard interrupts terminate the loop without traceback output.
"""

from dotenv import load_dotenv

load_dotenv()

import asyncio
import logging
import os
import sys

from pydantic import ValidationError

from app.core.contracts import AnsweredQuestion, PromptRequest, QuestionsRequest
from app.core.engine import generate_prompts, generate_questions
from app.core.errors import PipelineError


# =========================================================
# CONFIGURATION
# =========================================================

def load_settings():
    """Return provider settings from the environment, or `None` when incomplete."""
    ai1_provider = os.getenv("AI1_PROVIDER", "").strip()
    ai1_key = os.getenv("AI1_API_KEY", "").strip()
    if not ai1_provider or not ai1_key:
        return None

    return {
        "ai1Provider": ai1_provider,
        "ai1ApiKey": ai1_key,
        "ai2Provider": os.getenv("AI2_PROVIDER", "").strip() or ai1_provider,
        "ai2ApiKey": os.getenv("AI2_API_KEY", "").strip() or ai1_key,
    }


def read_mode():
    answer = input("Mode [quick/detailed] (quick): ").strip().lower()
    return "detailed" if answer in ("d", "detailed") else "quick"


def ask_questions(settings, user_prompt):
    """Fetch clarifying questions and collect one answer per question."""
    request = QuestionsRequest.model_validate({
        "userPrompt": user_prompt,
        "ai1Provider": settings["ai1Provider"],
        "ai1ApiKey": settings["ai1ApiKey"],
    })
    result = asyncio.run(generate_questions(request))

    answered = []
    for index, item in enumerate(result.questions, start=1):
        question = str(item.get("question", "")).strip()
        if not question:
            continue
        answer = input(f"\n{question}\n> ").strip()
        answered.append(AnsweredQuestion(
            id=str(item.get("id", index)),
            question=question,
            answer=answer,
        ))
    return answered


def print_result(result):
    print("\n" + "=" * 60)
    print("OPTION 1:\n")
    print(result.option1)
    print("\n" + "-" * 60)
    print("OPTION 2:\n")
    print(result.option2)
    print("=" * 60)
    meta = result.metadata
    print(
        f"{meta.draft_provider_id} -> {meta.optimize_provider_id} | "
        f"{meta.mode} | {meta.processing_time_seconds:.1f}s"
    )


# =========================================================
# MAIN APPLICATION LOOP
# =========================================================

def main():
    """
    Run the interactive terminal session.

    Interaction with core:
    - Calls `generate_questions` for detailed mode.
    - Calls `generate_prompts` once per prompt idea.
    """
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "WARNING").upper())

    settings = load_settings()
    if settings is None:
        print("AI1_PROVIDER and AI1_API_KEY must be set.")
        sys.exit(1)

    print("Prompt refiner started. (Type 'exit' to quit)\n")
    print(f"Draft: {settings['ai1Provider']}  Optimize: {settings['ai2Provider']}")
    print("-" * 60)

    while True:

        try:
            user_prompt = input("Prompt idea: ").strip()
            if not user_prompt:
                continue

            if user_prompt.lower() in ("exit", "quit"):
                print("Shutting down.")
                break

            mode = read_mode()
            answered = ask_questions(settings, user_prompt) if mode == "detailed" else None

            request = PromptRequest.model_validate({
                **settings,
                "userPrompt": user_prompt,
                "mode": mode,
                "questions": [q.model_dump() for q in answered] if answered else None,
            })

            print("\nGenerating...\n")
            print_result(asyncio.run(generate_prompts(request)))

        except (EOFError, KeyboardInterrupt):
            print("\nInterrupted.")
            break

        except ValidationError as err:
            print(f"\nInvalid input: {err}")

        except PipelineError as err:
            print(f"\nError: {err.user_message}")

        print("\n" + "-" * 60 + "\n")


if __name__ == "__main__":
    main()
