"""Config-document validation — load the linter config and check its shape.

DocumentValidator is an ordinary Validator, so the config field gets the
same debounce/supersede/teardown behavior as any path field. When the
document is valid the channel also publishes it, already parsed.
"""

from __future__ import annotations

from typing import Any, Mapping

from settlex.config import KernelConfig
from settlex.lifecycle import Lifecycle
from settlex.protocols import ConfigDocument, ConfigStore, Validator
from settlex.validation import ValidationChannel, Verdict

LOAD_FAILED = "Failed to validate config file"


def structure_error(document: Any) -> str | None:
    """Why `document` is not a usable config, or None if it is."""
    if not isinstance(document, Mapping):
        return "Config file is not a valid object"
    styles_path = document.get("StylesPath")
    if styles_path is not None and not isinstance(styles_path, str):
        return "StylesPath must be a string"
    global_section = document.get("*")
    if not isinstance(global_section, Mapping):
        return 'Config file must have a "*" section'
    markdown = global_section.get("md")
    if not isinstance(markdown, Mapping):
        return 'Config file must have a "*.md" section'
    based_on = markdown.get("BasedOnStyles")
    if based_on is not None and not isinstance(based_on, str):
        return "BasedOnStyles must be a string"
    return None


class DocumentValidator:
    """Path check (optional), then load, then structure check."""

    def __init__(self, store: ConfigStore, path_validator: Validator | None = None) -> None:
        self._store = store
        self._path_validator = path_validator

    async def check(self, value: str) -> Verdict:
        if self._path_validator is not None:
            path_verdict = Verdict.coerce(await self._path_validator.check(value))
            if not path_verdict.valid:
                return Verdict(False, path_verdict.error or "Config path is invalid")
        document = await self._store.load()
        problem = structure_error(document)
        if problem is not None:
            return Verdict(False, problem)
        return Verdict(True, value=document)


class ConfigValidation(ValidationChannel):
    """Validation channel for the config path that also exposes the parsed document."""

    def __init__(
        self,
        store: ConfigStore,
        *,
        config_path: str | None = None,
        path_validator: Validator | None = None,
        interval: float | None = None,
        config: KernelConfig | None = None,
        lifecycle: Lifecycle | None = None,
    ) -> None:
        super().__init__(
            DocumentValidator(store, path_validator),
            initial=config_path,
            interval=interval,
            config=config,
            lifecycle=lifecycle,
            name="config",
            fallback_error=LOAD_FAILED,
        )

    @property
    def document(self) -> ConfigDocument | None:
        return self.parsed.get()
