"""API blueprint package aggregating versioned endpoints."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def _join_prefix(base: str, rel: str) -> str:
    parts = [p.strip("/") for p in (base, rel) if p.strip("/")]
    return "/" + "/".join(parts)


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Mount each ``(blueprint, relative_prefix)`` under ``base_prefix``.

    An empty relative prefix mounts the blueprint at the version root
    (``/api/v1/health``); ``"/auth"`` yields ``/api/v1/auth/...``.
    """
    for bp, rel_prefix in entries:
        app.register_blueprint(bp, url_prefix=_join_prefix(base_prefix, rel_prefix))


def init_app(app: Flask) -> None:
    """Register every API version on ``app``."""
    from survey_basket.api.v1 import API_VERSION as V1
    from survey_basket.api.v1 import REGISTRY as V1_REGISTRY

    api_base = app.config.get("API_BASE_PREFIX", "/api")
    register_blueprint_group(app, base_prefix=f"{api_base}/{V1}", entries=V1_REGISTRY)


__all__ = ["init_app", "register_blueprint_group"]
