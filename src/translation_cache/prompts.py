"""Prompt construction for translation requests.

Every cached translation is only valid for the prompt that produced it.
Bump ``PROMPT_SCHEMA_VERSION`` whenever the wording, language names or
message layout below change; the version is part of every cache key, so old
entries stop matching without a bulk delete.
"""

PROMPT_SCHEMA_VERSION = "v2"

AUTO_DETECT = "auto"

LANGUAGE_NAMES = {
    "zh-TW": "Traditional Chinese (繁體中文)",
    "en": "English",
    "ja": "Japanese (日本語)",
    "ko": "Korean (한국어)",
    "th": "Thai (ไทย)",
    "vi": "Vietnamese (Tiếng Việt)",
    "id": "Indonesian (Bahasa Indonesia)",
    "ms": "Malay (Bahasa Melayu)",
    AUTO_DETECT: "the source language (auto-detect)",
}


def language_name(code: str) -> str:
    """Return a human-readable language name, falling back to the code itself."""
    return LANGUAGE_NAMES.get(code, code)


class PromptLibrary:
    """Build the chat messages sent to the inference provider."""

    def system_prompt(self) -> str:
        """Return the system prompt for natural, native-sounding translation."""
        return (
            "You are an experienced interpreter. Translate for natural expression "
            "in the target language rather than word-for-word. Use the phrasing a "
            "native speaker would use for greetings, idioms and social expressions. "
            "Return only the translated text with no commentary or quotation marks."
        )

    def user_prompt(self, text: str, source_variant: str | None, target_variant: str) -> str:
        """Return the user prompt for one translation request."""
        target_name = language_name(target_variant)
        if source_variant is None or source_variant == AUTO_DETECT:
            instruction = f"Translate the following text to {target_name}."
        else:
            instruction = (
                f"Translate the following text from {language_name(source_variant)} "
                f"to {target_name}."
            )
        return f"{instruction}\n\nText to translate:\n{text}"

    def messages(
        self,
        text: str,
        source_variant: str | None,
        target_variant: str,
    ) -> list[dict[str, str]]:
        """Return the chat-completions message list for one request."""
        return [
            {"role": "system", "content": self.system_prompt()},
            {"role": "user", "content": self.user_prompt(text, source_variant, target_variant)},
        ]
