"""Render context handed to bootstrap templates."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from ..config import Config
from ..utils import sanitize_name


class WebsiteContext(BaseModel):
    deployment: str = ""
    framework: str = ""
    rendering: str = ""
    route_map: bool = False
    future_flags: dict[str, bool] = Field(default_factory=dict)
    convex: bool = False


class TUIContext(BaseModel):
    libs: list[str] = Field(default_factory=list)


class IOSContext(BaseModel):
    tuist: bool = False
    data_backend: str = ""


class AgentsContext(BaseModel):
    bundle: bool = False
    output: str = "AGENTS.md"


class RenderContext(BaseModel):
    """Resolved values for one project's templates.

    Only the nested context matching the project's kind is populated; the
    others stay ``None``.
    """

    name: str
    kind: str
    features: list[str] = Field(default_factory=list)
    website: WebsiteContext | None = None
    tui: TUIContext | None = None
    ios: IOSContext | None = None
    agents: AgentsContext | None = None

    @classmethod
    def from_config(cls, config: Config) -> RenderContext:
        """Derive a render context from a defaulted config document."""
        ctx = cls(name=config.name, kind=config.kind, features=list(config.features))

        if config.website is not None:
            site = config.website
            ctx.website = WebsiteContext(
                deployment=site.deployment.target or "",
                framework=site.framework or "",
                rendering=site.rendering or "",
                route_map=bool(site.route_map),
                future_flags=dict(site.react_router.future_flags or {}),
                convex=config.has_feature("convex"),
            )
        if config.tui is not None:
            ctx.tui = TUIContext(libs=list(config.tui.libs or []))
        if config.ios is not None:
            ctx.ios = IOSContext(
                tuist=bool(config.ios.tuist),
                data_backend=config.ios.data_backend or "",
            )
        if config.agents is not None:
            ctx.agents = AgentsContext(
                bundle=bool(config.agents.bundle),
                output=config.agents.output or "AGENTS.md",
            )
        return ctx

    @property
    def deployment_target(self) -> str:
        return self.website.deployment if self.website is not None else ""

    @property
    def package_name(self) -> str:
        return sanitize_name(self.name)

    def has_feature(self, name: str) -> bool:
        return name in self.features

    def as_template_vars(self) -> dict[str, Any]:
        """Return the variables exposed to Jinja2 templates."""
        data = self.model_dump()
        data["package_name"] = self.package_name
        data["has_feature"] = self.has_feature
        return data
