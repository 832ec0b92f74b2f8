"""FastAPI application serving the channel catalog."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from .. import __version__
from ..models import Configuration
from ..playlist import ChannelCache, M3UParser, PlaylistFetcher, render_m3u
from ..settings import Settings, load_settings
from ..utils.config_codec import SOURCE_FIELD, TARGET_FIELD, ConfigCodec
from ..utils.http_client import HttpClient
from . import views
from .paths import MANIFEST_FILE, MANIFEST_RESOURCE, resolve_path

PLAYLIST_RESOURCE = "playlist.m3u"
EXTRA_PARAMS = ("genre", "search", "skip")


def build_cache(settings: Settings, http_client: HttpClient) -> ChannelCache:
    return ChannelCache(
        PlaylistFetcher(http_client),
        parser=M3UParser(default_logo=settings.default_logo),
    )


def create_app(
    settings: Optional[Settings] = None,
    cache: Optional[ChannelCache] = None,
    codec: Optional[ConfigCodec] = None,
) -> FastAPI:
    """Builds the add-on app; pass ``cache`` or ``codec`` to share or stub them."""

    settings = settings or load_settings()
    codec = codec or ConfigCodec(default_source=settings.m3u_url)
    default_config = Configuration(source=settings.m3u_url, substitution_target=settings.target_ip)

    http_client: Optional[HttpClient] = None
    if cache is None:
        http_client = HttpClient(timeout=settings.http_timeout)
        cache = build_cache(settings, http_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if http_client is not None:
            await http_client.aclose()

    app = FastAPI(
        title="AceList",
        description="M3U channel list exposed as a Stremio-style catalog",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.get("/{path:path}")
    async def addon_resource(path: str, request: Request) -> Response:
        params = request.query_params
        if SOURCE_FIELD in params or TARGET_FIELD in params:
            source = (params.get(SOURCE_FIELD) or "").strip() or settings.m3u_url
            config = Configuration(source=source, substitution_target=params.get(TARGET_FIELD))
            token = codec.encode(config)
            logging.info("Minted configuration token %s", token)
            return RedirectResponse(f"/{token}/{MANIFEST_FILE}", status_code=302)

        raw_path = request.scope.get("raw_path")
        request_path = raw_path.decode("latin-1").split("?", 1)[0] if raw_path else request.url.path
        target = resolve_path(request_path, codec, default_config)
        logging.debug("Resolved %s to %s (configured=%s)", path, target.segments, target.configured)
        extra = {key: params[key] for key in EXTRA_PARAMS if key in params}
        extra.update(target.extra)
        segments = target.segments
        config = target.config

        if target.kind == MANIFEST_RESOURCE and len(segments) <= 1:
            channels = await cache.get(config)
            return JSONResponse(views.build_manifest(config, channels, settings.m3u_url))

        if target.kind == "catalog" and len(segments) == 3:
            if segments[1] != views.CONTENT_TYPE or segments[2] != views.CATALOG_ID:
                return JSONResponse({"metas": []})
            channels = await cache.get(config)
            return JSONResponse(views.build_catalog(channels, extra))

        if target.kind in ("meta", "stream") and len(segments) == 3:
            channels = await cache.get(config)
            channel = views.find_channel(channels, segments[2])
            if target.kind == "meta":
                return JSONResponse(views.build_meta(config, channel))
            return JSONResponse(views.build_streams(config, channel))

        if target.kind == PLAYLIST_RESOURCE and len(segments) == 1:
            channels = await cache.get(config)
            return Response(
                content=render_m3u(channels),
                media_type="application/x-mpegURL",
                headers={"Content-Disposition": f'attachment; filename="{PLAYLIST_RESOURCE}"'},
            )

        return Response(status_code=404)

    return app
