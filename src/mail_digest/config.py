from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SINGLE_BODY_CHAR_LIMIT = 4000
DEFAULT_MULTI_ITEM_CHAR_BUDGET = 50000


def positive_or_default(value: int | None, default: int) -> int:
    if value is None or int(value) <= 0:
        return default
    return int(value)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    single_body_char_limit: int = DEFAULT_SINGLE_BODY_CHAR_LIMIT
    multi_item_char_budget: int = DEFAULT_MULTI_ITEM_CHAR_BUDGET

    truncation_marker: str = "\n\n[... body truncated ...]"
    no_content_placeholder: str = "(no body content)"
    quote_container_tag: str = "blockquote"

    reply_stripper: str = "mailparser"
    reply_parser_languages: str = "en"

    log_level: str = "INFO"

    @property
    def body_char_limit(self) -> int:
        return positive_or_default(self.single_body_char_limit, DEFAULT_SINGLE_BODY_CHAR_LIMIT)

    @property
    def response_char_budget(self) -> int:
        return positive_or_default(self.multi_item_char_budget, DEFAULT_MULTI_ITEM_CHAR_BUDGET)

    @property
    def reply_languages(self) -> tuple[str, ...]:
        languages = tuple(lang.strip() for lang in self.reply_parser_languages.split(",") if lang.strip())
        return languages or ("en",)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
