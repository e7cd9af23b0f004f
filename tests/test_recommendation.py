import pytest

from app.aromasens.errors import CatalogEmptyError, InvalidInputError, ProviderError
from app.aromasens.models import ChatPreferences
from app.aromasens.recommendation import RecommendationGenerator
from app.aromasens.storage import MemStorage
from conftest import total_calls


def test_uses_recommended_id_when_in_catalog(generator, storage, preferences):
    response = generator.generate("femenino", preferences)

    rec = response.recommendation
    assert response.is_complete is True
    assert rec.perfume_id == 2
    assert rec.name == "Velvet Dream"
    assert rec.brand == "Lumine"
    assert rec.occasions == "Uso diario, Trabajo, Eventos casuales"
    assert rec.notes == ["Vainilla", "Flores blancas", "Almizcle", "Sándalo"]


def test_description_combines_reason_and_catalog_text(generator, storage, preferences):
    rec = generator.generate("femenino", preferences).recommendation
    assert "Su calidez encaja con las notas de vainilla." in rec.description
    assert storage.get_perfume(2).description in rec.description


@pytest.mark.parametrize("bad_id", [5, 99, 0, -3])
def test_out_of_catalog_id_falls_back_to_first(generator, providers, preferences, bad_id):
    providers["primary"].profile = {
        "psychologicalProfile": "p",
        "recommendedPerfumeId": bad_id,
        "recommendationReason": "r",
    }
    response = generator.generate("femenino", preferences)
    assert response.recommendation.perfume_id == 1


def test_masculine_id_never_used_for_feminine_session(generator, providers, preferences, storage):
    # id 4 belongs to the masculine catalog
    providers["primary"].profile = {
        "psychologicalProfile": "p",
        "recommendedPerfumeId": 4,
        "recommendationReason": "r",
    }
    rec = generator.generate("femenino", preferences).recommendation
    feminine = {(p.brand, p.name) for p in storage.get_perfumes("femenino")}
    assert (rec.brand, rec.name) in feminine


def test_creates_one_session_and_one_recommendation(generator, storage, preferences):
    response = generator.generate("femenino", preferences)

    session_id = int(response.session_id)
    session = storage.get_chat_session(session_id)
    assert session.gender == "femenino"
    assert session.user_id is None
    assert session.preferences == preferences

    recommendations = storage.get_recommendations_by_session(session_id)
    assert len(recommendations) == 1
    assert recommendations[0].chat_session_id == session_id
    assert recommendations[0].perfume_id == response.recommendation.perfume_id
    assert recommendations[0].reason == "Su calidez encaja con las notas de vainilla."
    assert storage.get_chat_session(session_id + 1) is None


def test_each_call_gets_a_new_session(generator, preferences):
    first = generator.generate("femenino", preferences)
    second = generator.generate("masculino", preferences)
    assert first.session_id == "1"
    assert second.session_id == "2"


def test_prompt_includes_gender_and_catalog_ids(generator, providers, preferences):
    generator.generate("masculino", preferences)
    call = providers["primary"].calls[0]
    assert call["json_mode"] is True
    assert "[4, 5, 6]" in call["prompt"]
    assert "Género: masculino" in call["prompt"]


def test_empty_catalog_is_fatal(ai_service, providers, preferences):
    generator = RecommendationGenerator(ai_service, MemStorage())
    with pytest.raises(CatalogEmptyError):
        generator.generate("femenino", preferences)
    assert total_calls(providers) == 0


def test_provider_failure_propagates(generator, providers, storage, preferences):
    providers["primary"].fail = True
    providers["secondary"].fail = True

    with pytest.raises(ProviderError):
        generator.generate("femenino", preferences)
    assert storage.get_chat_session(1) is None


def test_incomplete_preferences_rejected(generator, providers):
    prefs = ChatPreferences(age="25", experience="ninguna", occasion="", preferences="floral")
    with pytest.raises(InvalidInputError):
        generator.generate("femenino", prefs)
    assert total_calls(providers) == 0


def test_invalid_gender_rejected(generator, providers, preferences):
    with pytest.raises(InvalidInputError):
        generator.generate("unisex", preferences)
    assert total_calls(providers) == 0


def test_english_confirmation(generator, preferences):
    response = generator.generate("femenino", preferences, language="en")
    assert response.message.startswith("Based on your preferences")
