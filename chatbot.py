from typing import Callable, Dict, List, Optional

from app.aromasens.catalog import seed_catalog
from app.aromasens.config import settings
from app.aromasens.conversation import ConversationEngine, default_chat_settings
from app.aromasens.errors import AromasensError
from app.aromasens.log import configure_logging
from app.aromasens.models import GENDERS, STEP_FIELDS, ConversationStep, UserResponses
from app.aromasens.providers import AIService, build_providers
from app.aromasens.recommendation import RecommendationGenerator
from app.aromasens.storage import MemStorage


def _show(text: str, quick_responses: Optional[List[str]] = None, output: Callable[[str], None] = print):
    output(f"\nAROMASENS: {text}")
    if quick_responses:
        output("  Sugerencias: " + " | ".join(quick_responses))


def run_chatbot(engine: ConversationEngine, generator: RecommendationGenerator,
                input_fn: Callable[[str], str] = input, output: Callable[[str], None] = print) -> Optional[dict]:
    """Walk the four questions in the terminal and print the recommendation."""
    gender = ""
    while gender not in GENDERS:
        gender = input_fn(f"Género ({' / '.join(GENDERS)}): ").strip().lower()

    responses = UserResponses(gender=gender)
    history: List[Dict[str, str]] = []

    response = engine.start(gender)
    history.append({"role": "assistant", "content": response.message})
    _show(response.message, output=output)
    step = response.step

    while step < ConversationStep.COMPLETE:
        user_input = input_fn("Tú: ").strip()
        if not user_input:
            continue
        # The answer belongs to the step that was just asked
        setattr(responses, STEP_FIELDS[ConversationStep(step)], user_input)
        history.append({"role": "user", "content": user_input})

        response = engine.advance(user_input, gender, step, history=history)
        history.append({"role": "assistant", "content": response.message})
        _show(response.message, response.quick_responses, output=output)
        step = response.step

    output("\nBuscando tu perfume ideal...\n")
    try:
        result = generator.generate(gender, responses.to_preferences(), history=history)
    except AromasensError as e:
        output(f"No pudimos generar tu recomendación: {e}")
        return None

    rec = result.recommendation
    _show(result.message, output=output)
    output(f"\n  {rec.name} - {rec.brand}")
    output(f"  {rec.description}")
    output(f"  Notas: {', '.join(rec.notes)}")
    output(f"  Ocasiones: {rec.occasions}")
    return result.model_dump(by_alias=True, exclude_none=True)


def main():
    configure_logging()
    storage = MemStorage()
    seed_catalog(storage)
    ai = AIService(build_providers(settings), settings.default_provider)
    chat_settings = default_chat_settings(settings, ai)

    print("\nPerfume assistant ready!\n")
    run_chatbot(ConversationEngine(ai, chat_settings), RecommendationGenerator(ai, storage, chat_settings))


if __name__ == "__main__":
    main()
