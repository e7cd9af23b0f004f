"""
Prompt templates and fixed copy for the AROMASENS assistant.

Everything the assistant says without asking a model (quick replies,
completion and apology messages) lives here too, in Spanish and English.
"""
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from .models import FEMININE, ChatMessage, ChatPreferences, ConversationStep, Language

MAX_HISTORY_MESSAGES = 6

CHAT_SYSTEM_PROMPT = {
    Language.ES: "Eres un asistente amable de una tienda de perfumes. Tus respuestas son concisas, útiles y en español.",
    Language.EN: "You are a friendly perfume store assistant. Keep your responses concise, helpful, and in English.",
}

PROFILE_SYSTEM_PROMPT = {
    Language.ES: (
        "Eres un asistente experto en perfumería y psicología, especializado en hacer recomendaciones "
        "personalizadas basadas en perfiles psicológicos. Siempre respondes en formato JSON."
    ),
    Language.EN: (
        "You are a perfume expert and psychologist specializing in fragrance recommendations. "
        "You always answer in JSON."
    ),
}

QUICK_RESPONSES = {
    # nextStep == 3
    "occasions": {
        Language.ES: ["Uso diario", "Eventos formales", "Citas románticas", "Reuniones sociales", "Trabajo"],
        Language.EN: ["Daily use", "Formal events", "Romantic dates", "Social gatherings", "Work"],
    },
    # nextStep == 4
    "families": {
        Language.ES: ["Florales", "Frutales", "Amaderadas", "Orientales/especiadas", "Cítricas", "Dulces"],
        Language.EN: ["Floral", "Fruity", "Woody", "Oriental/spicy", "Citrus", "Sweet"],
    },
}

STEP_TASKS = {
    Language.ES: {
        ConversationStep.EXPERIENCE: "Pregunta sobre su experiencia con perfumes y sus favoritos.",
        ConversationStep.OCCASION: "Pregunta sobre las ocasiones para las que quiere el perfume.",
        ConversationStep.PREFERENCES: "Pregunta sobre sus notas o tipos de fragancias preferidas.",
        ConversationStep.COMPLETE: "Agradece sus respuestas y hazle saber que le proporcionarás una recomendación.",
    },
    Language.EN: {
        ConversationStep.EXPERIENCE: "Ask about their experience with perfumes and their favorites.",
        ConversationStep.OCCASION: "Ask about the occasions they want the perfume for.",
        ConversationStep.PREFERENCES: "Ask about their preferred fragrance notes or types.",
        ConversationStep.COMPLETE: "Thank them for their answers and let them know you'll provide a recommendation.",
    },
}

COMPLETION_MESSAGE = {
    Language.ES: "¡Gracias por tus respuestas! Basándome en tu perfil y preferencias, ya tengo una recomendación perfecta para ti.",
    Language.EN: "Thank you for your answers! Based on your profile and preferences, I already have the perfect recommendation for you.",
}

RECOMMENDATION_MESSAGE = {
    Language.ES: "Basado en tus preferencias y perfil, hemos encontrado el perfume perfecto para ti.",
    Language.EN: "Based on your preferences and profile, we have found the perfect perfume for you.",
}

APOLOGY_MESSAGE = {
    Language.ES: "Lo siento, estoy teniendo problemas para procesar tu solicitud. ¿Podrías intentarlo de nuevo?",
    Language.EN: "Sorry, I'm having trouble processing your request. Could you try again?",
}

# Canned questions used when the backend is down, so the flow can continue
FALLBACK_QUESTIONS = {
    Language.ES: {
        ConversationStep.AGE: "¡Hola! Soy el asistente de AROMASENS. Para empezar, ¿cuántos años tienes?",
        ConversationStep.EXPERIENCE: "¿Qué experiencia tienes con los perfumes? ¿Tienes alguno favorito?",
        ConversationStep.OCCASION: "¿Para qué ocasiones quieres el perfume?",
        ConversationStep.PREFERENCES: "¿Qué notas o tipos de fragancias prefieres?",
        ConversationStep.COMPLETE: "¡Gracias por tus respuestas! Enseguida te daré una recomendación.",
    },
    Language.EN: {
        ConversationStep.AGE: "Hi! I'm the AROMASENS assistant. To begin, how old are you?",
        ConversationStep.EXPERIENCE: "What is your experience with perfumes? Do you have a favorite?",
        ConversationStep.OCCASION: "What occasions do you want the perfume for?",
        ConversationStep.PREFERENCES: "Which fragrance notes or types do you prefer?",
        ConversationStep.COMPLETE: "Thank you for your answers! I'll give you a recommendation right away.",
    },
}


def _audience(gender: str, language: Language) -> str:
    if language == Language.EN:
        return "feminine" if gender == FEMININE else "masculine"
    return "femeninas" if gender == FEMININE else "masculinas"


def trim_history(history: Optional[Sequence[Any]], max_messages: int = MAX_HISTORY_MESSAGES) -> List[Dict[str, str]]:
    """Keep the last well-formed user/assistant messages, oldest first."""
    if not history:
        return []
    kept = []
    for item in history:
        try:
            message = ChatMessage.model_validate(item)
        except ValidationError:
            continue
        if message.content.strip():
            kept.append({"role": message.role, "content": message.content.strip()})
    return kept[-max_messages:]


def render_history(history: Optional[Sequence[Any]], language: Language) -> str:
    messages = trim_history(history)
    if not messages:
        return ""
    if language == Language.EN:
        labels, title = {"user": "Customer", "assistant": "Assistant"}, "Conversation so far:"
    else:
        labels, title = {"user": "Cliente", "assistant": "Asistente"}, "Conversación hasta ahora:"
    lines = [f"{labels[m['role']]}: {m['content']}" for m in messages]
    return title + "\n" + "\n".join(lines)


def start_prompt(gender: str, language: Language) -> str:
    if language == Language.EN:
        return (
            "You are the virtual assistant of a perfume store called AROMASENS. You are having a conversation "
            "with a customer to recommend the perfect perfume.\n\n"
            f"The customer is looking for {_audience(gender, language)} fragrances.\n\n"
            "You are starting the conversation. Introduce yourself and ask for the customer's age.\n\n"
            "Your answer must be conversational, friendly and concise."
        )
    return (
        "Eres un asistente virtual de una tienda de perfumes llamada AROMASENS. Estás manteniendo una "
        "conversación con un cliente para recomendarle el perfume perfecto.\n\n"
        f"El cliente está buscando fragancias {_audience(gender, language)}.\n\n"
        "Estás iniciando la conversación. Preséntate y pregunta por la edad del cliente.\n\n"
        "Tu respuesta debe ser conversacional, amistosa y concisa."
    )


def step_prompt(message: str, gender: str, next_step: ConversationStep, language: Language,
                history: Optional[Sequence[Any]] = None) -> str:
    task = STEP_TASKS[language][next_step]
    context = render_history(history, language)
    context = f"{context}\n\n" if context else ""
    if language == Language.EN:
        return (
            "You are the virtual assistant of a perfume store called AROMASENS. You are having a conversation "
            "with a customer to recommend the perfect perfume.\n\n"
            f"The customer is looking for {_audience(gender, language)} fragrances.\n\n"
            f"{context}"
            f"The customer's last message was: \"{message}\"\n\n"
            f"You are at step {int(next_step)} of the conversation. At this step your task is: {task}\n\n"
            "Your answer must be conversational, friendly and concise. Don't use numbered steps."
        )
    return (
        "Eres un asistente virtual de una tienda de perfumes llamada AROMASENS. Estás manteniendo una "
        "conversación con un cliente para recomendarle el perfume perfecto.\n\n"
        f"El cliente está buscando fragancias {_audience(gender, language)}.\n\n"
        f"{context}"
        f"El último mensaje del cliente fue: \"{message}\"\n\n"
        f"Estás en el paso {int(next_step)} de la conversación. En este paso, tu tarea es: {task}\n\n"
        "Tu respuesta debe ser conversacional, amistosa y concisa. No uses pasos numerados."
    )


def profile_prompt(gender: str, preferences: ChatPreferences, perfume_ids: Sequence[int],
                   language: Language, history: Optional[Sequence[Any]] = None) -> str:
    ids = ", ".join(str(i) for i in perfume_ids)
    context = render_history(history, language)
    context = f"\n{context}\n" if context else ""
    if language == Language.EN:
        return (
            "Act as an expert in perfumery and psychology. Based on the following information about the user:\n\n"
            f"- Gender: {gender}\n"
            f"- Age: {preferences.age}\n"
            f"- Previous experience with perfumes: {preferences.experience}\n"
            f"- Occasion of use: {preferences.occasion}\n"
            f"- Personal preferences: {preferences.preferences}\n"
            f"{context}\n"
            "1. Write a brief psychological profile of the user (3-4 sentences).\n"
            f"2. Choose the perfume ID from this list that best matches the profile: [{ids}]\n"
            "3. Explain why it fits, connecting their psychology to the fragrance (2-3 sentences).\n\n"
            "Respond only with JSON in exactly this format:\n"
            "{\n"
            '  "psychologicalProfile": "user psychological profile",\n'
            '  "recommendedPerfumeId": number,\n'
            '  "recommendationReason": "reason for the recommendation"\n'
            "}"
        )
    return (
        "Actúa como un experto en perfumería y psicología. Basándote en la siguiente información del usuario:\n\n"
        f"- Género: {gender}\n"
        f"- Edad: {preferences.age}\n"
        f"- Experiencia previa con perfumes: {preferences.experience}\n"
        f"- Ocasión de uso: {preferences.occasion}\n"
        f"- Preferencias personales: {preferences.preferences}\n"
        f"{context}\n"
        "1. Crea un breve perfil psicológico del usuario (3-4 frases).\n"
        f"2. Elige el ID de perfume de esta lista que mejor encaje con su perfil: [{ids}]\n"
        "3. Explica por qué encaja, conectando su psicología con la fragancia (2-3 frases).\n\n"
        "Devuelve solo JSON con esta estructura exacta:\n"
        "{\n"
        '  "psychologicalProfile": "perfil psicológico del usuario",\n'
        '  "recommendedPerfumeId": número,\n'
        '  "recommendationReason": "motivo de la recomendación"\n'
        "}"
    )


DEGRADED_NOTICE = {
    Language.ES: "Lo siento, estoy teniendo problemas para conectar con nuestro asistente, pero podemos seguir.",
    Language.EN: "Sorry, I'm having trouble reaching our assistant, but we can keep going.",
}


def degraded_message(step: ConversationStep, language: Language) -> str:
    """Fixed text for a step when every backend failed."""
    return f"{DEGRADED_NOTICE[language]} {FALLBACK_QUESTIONS[language][step]}"
