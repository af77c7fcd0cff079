"""Pydantic models for generator options and environment overlays."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Environment = Literal["development", "production"]


class OptionsOverlay(BaseModel):
    """Partial options applied on top of the base options for one environment."""

    model_config = ConfigDict(extra="forbid")

    nonce: bool | str | None = None
    additional_rules: dict[str, list[str]] | None = None
    report_uri: str | None = None
    include_self: bool | None = None
    unsafe_inline: bool | None = None
    unsafe_eval: bool | None = None
    nonce_length: int | None = Field(default=None, gt=0)
    nonce_encoding: Literal["base64", "hex"] | None = None


class GenerationOptions(BaseModel):
    """Options for a single generate_csp call."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    services: list[Any] = Field(default_factory=list)
    nonce: bool | str = False
    additional_rules: dict[str, list[str]] = Field(default_factory=dict)
    report_uri: str | None = None
    include_self: bool = True
    unsafe_inline: bool = False
    unsafe_eval: bool = False
    nonce_length: int = Field(default=16, gt=0)
    nonce_encoding: Literal["base64", "hex"] = "base64"

    # None falls back to the configured default environment
    environment: Environment | None = None
    development: OptionsOverlay | None = None
    production: OptionsOverlay | None = None

    # RandomSource used for auto-generated nonces; None uses the process default
    random_source: Any = Field(default=None, exclude=True)

    def for_environment(self, environment: str) -> GenerationOptions:
        """Shallow-merge the overlay for ``environment`` over these options.

        "production" selects the production overlay; anything else selects
        the development overlay. Only fields the overlay sets explicitly win.
        """
        overlay = self.production if environment == "production" else self.development
        if overlay is None:
            return self
        update = overlay.model_dump(exclude_unset=True)
        # An explicit None in the overlay means "not set"; keep the base value
        update = {key: value for key, value in update.items() if value is not None}
        return self.model_copy(update=update)
