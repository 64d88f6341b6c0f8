from typing import Tuple

from pydantic import BaseModel, ConfigDict

from core.persona import prompts


class PersonaConfig(BaseModel):
    """
    Fixed persona configuration for one companion session.

    The instruction text and sampling parameters are sent with every
    dispatch; the canned lines are used locally by the session manager
    (greeting) and the dispatcher (fallback + failure texts).
    """

    model_config = ConfigDict(frozen=True)

    system_instruction: str = prompts.SYSTEM_INSTRUCTION
    temperature: float = 0.9
    top_p: float = 0.95
    model: str = "gpt-4.1-mini"
    image_model: str = "gpt-image-1"

    greeting: str = prompts.GREETING
    empty_response_fallback: str = prompts.EMPTY_RESPONSE_FALLBACK
    auth_failure_text: str = prompts.AUTH_FAILURE_TEXT
    quota_failure_text: str = prompts.QUOTA_FAILURE_TEXT
    general_failure_text: str = prompts.GENERAL_FAILURE_TEXT

    moods: Tuple[str, ...] = prompts.AVAILABLE_MOODS

    def with_mood_instruction(self) -> "PersonaConfig":
        """Return a copy whose system instruction asks for a [MOOD: ...] tag."""
        extra = prompts.MOOD_INSTRUCTION.format(moods=", ".join(self.moods))
        return self.model_copy(
            update={"system_instruction": f"{self.system_instruction}\n{extra}"}
        )

    def avatar_prompt(self, mood: str) -> str:
        return prompts.AVATAR_PROMPT.format(mood=mood).strip()


def build_persona(settings, mood_avatars: bool = None) -> PersonaConfig:
    """Build the PersonaConfig from a Settings instance."""
    persona = PersonaConfig(
        temperature=settings.temperature,
        top_p=settings.top_p,
        model=settings.chat_model,
        image_model=settings.image_model,
    )
    if mood_avatars is None:
        mood_avatars = settings.mood_avatars_enabled
    return persona.with_mood_instruction() if mood_avatars else persona
