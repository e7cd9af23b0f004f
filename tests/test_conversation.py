import pytest

from app.aromasens.conversation import ConversationEngine, quick_responses_for, resolve_language
from app.aromasens.errors import InvalidInputError
from app.aromasens.models import ChatSettings, ConversationStep, Language, ProviderId
from app.aromasens.prompts import COMPLETION_MESSAGE
from conftest import total_calls

OCCASIONS = ["Uso diario", "Eventos formales", "Citas románticas", "Reuniones sociales", "Trabajo"]
FAMILIES = ["Florales", "Frutales", "Amaderadas", "Orientales/especiadas", "Cítricas", "Dulces"]


class TestStart:
    @pytest.mark.parametrize("gender,audience", [("femenino", "femeninas"), ("masculino", "masculinas")])
    def test_start(self, engine, providers, gender, audience):
        response = engine.start(gender)

        assert response.step == 0
        assert response.message == "Respuesta de primary"
        assert response.quick_responses is None
        assert response.is_complete is None
        prompt = providers["primary"].calls[0]["prompt"]
        assert audience in prompt
        assert "edad" in prompt

    def test_gender_is_normalized(self, engine):
        assert engine.start("  Femenino ").step == 0

    @pytest.mark.parametrize("gender", ["", "unisex", None])
    def test_invalid_gender(self, engine, providers, gender):
        with pytest.raises(InvalidInputError):
            engine.start(gender)
        assert total_calls(providers) == 0

    def test_english(self, engine, providers):
        engine.start("masculino", language="en")
        prompt = providers["primary"].calls[0]["prompt"]
        assert "masculine fragrances" in prompt
        assert "age" in prompt

    def test_provider_override(self, engine, providers):
        engine.start("femenino", provider_id="tertiary")
        assert len(providers["tertiary"].calls) == 1
        assert providers["primary"].calls == []

    def test_all_providers_down_gives_canned_reply(self, engine, providers):
        providers["primary"].fail = True
        providers["secondary"].fail = True

        response = engine.start("femenino")

        assert response.step == 0
        assert "AROMASENS" in response.message


class TestAdvance:
    @pytest.mark.parametrize("current_step", [0, 1, 2, 3])
    def test_moves_one_step(self, engine, current_step):
        response = engine.advance("respuesta", "femenino", current_step)
        assert response.step == current_step + 1
        assert not response.is_complete

    def test_quick_replies_only_at_steps_three_and_four(self, engine):
        assert engine.advance("25", "femenino", 0).quick_responses is None
        assert engine.advance("ninguna", "femenino", 1).quick_responses is None
        assert engine.advance("uso diario", "femenino", 2).quick_responses == OCCASIONS
        assert engine.advance("floral", "femenino", 3).quick_responses == FAMILIES

    def test_quick_reply_sets_have_fixed_sizes(self):
        assert len(quick_responses_for(3)) == 5
        assert len(quick_responses_for(4)) == 6
        assert len(quick_responses_for(3, Language.EN)) == 5
        assert len(quick_responses_for(4, Language.EN)) == 6
        assert quick_responses_for(1) is None
        assert quick_responses_for(2) is None

    def test_complete_is_terminal_and_idempotent(self, engine, providers):
        first = engine.advance("otra cosa", "masculino", 4)
        second = engine.advance("", "masculino", ConversationStep.COMPLETE)

        assert first == second
        assert first.is_complete is True
        assert first.step == 4
        assert first.message == COMPLETION_MESSAGE[Language.ES]
        assert total_calls(providers) == 0

    @pytest.mark.parametrize("bad_step", [-1, 5, 10, None, "2", 2.0, True])
    def test_out_of_range_step_rejected_before_ai_call(self, engine, providers, bad_step):
        with pytest.raises(InvalidInputError):
            engine.advance("hola", "femenino", bad_step)
        assert total_calls(providers) == 0

    def test_invalid_gender_rejected(self, engine, providers):
        with pytest.raises(InvalidInputError):
            engine.advance("hola", "otro", 1)
        assert total_calls(providers) == 0

    def test_empty_message_rejected(self, engine, providers):
        with pytest.raises(InvalidInputError):
            engine.advance("   ", "femenino", 1)
        assert total_calls(providers) == 0

    def test_prompt_carries_answer_task_and_history(self, engine, providers):
        history = [
            {"role": "assistant", "content": "¿Cuántos años tienes?"},
            {"role": "user", "content": "25"},
            {"role": "system", "content": "ignored"},
            "garbage",
        ]
        engine.advance("25", "femenino", 0, history=history)

        prompt = providers["primary"].calls[0]["prompt"]
        assert 'El último mensaje del cliente fue: "25"' in prompt
        assert "experiencia con perfumes" in prompt
        assert "Asistente: ¿Cuántos años tienes?" in prompt
        assert "Cliente: 25" in prompt
        assert "ignored" not in prompt

    def test_history_is_trimmed_to_last_six(self, engine, providers):
        history = [{"role": "user", "content": f"mensaje {i}"} for i in range(10)]
        engine.advance("hola", "femenino", 1, history=history)

        prompt = providers["primary"].calls[0]["prompt"]
        assert "mensaje 3" not in prompt
        assert "mensaje 4" in prompt
        assert "mensaje 9" in prompt

    def test_failure_keeps_flow_going(self, engine, providers):
        providers["primary"].fail = True
        providers["secondary"].fail = True

        response = engine.advance("uso diario", "femenino", 2)

        assert response.step == 3
        assert response.quick_responses == OCCASIONS
        assert response.message

    def test_english_quick_replies(self, engine):
        response = engine.advance("daily", "femenino", 2, language="en")
        assert response.quick_responses[0] == "Daily use"


def test_settings_drive_defaults(ai_service, providers):
    engine = ConversationEngine(ai_service, ChatSettings(model=ProviderId.SECONDARY, language=Language.EN))
    engine.start("femenino")
    assert len(providers["secondary"].calls) == 1
    assert "feminine" in providers["secondary"].calls[0]["prompt"]


def test_resolve_language():
    assert resolve_language(None) == Language.ES
    assert resolve_language("EN") == Language.EN
    assert resolve_language("fr", Language.EN) == Language.EN
