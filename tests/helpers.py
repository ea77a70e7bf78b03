"""Test helpers: in-memory layers and an in-process registry."""

import io
import tarfile
from typing import Any

from aiohttp import web

from registry_secret_scanner.core.types import MANIFEST_V2_MEDIA_TYPE
from registry_secret_scanner.utils.digest import calculate_digest

LAYER_MEDIA_TYPE = "application/vnd.docker.image.rootfs.diff.tar.gzip"
CONFIG_MEDIA_TYPE = "application/vnd.docker.container.image.v1+json"


def add_file(tar: tarfile.TarFile, name: str, content: bytes) -> None:
    """Add a regular file entry."""
    info = tarfile.TarInfo(name)
    info.size = len(content)
    info.mode = 0o644
    tar.addfile(info, fileobj=io.BytesIO(content))


def add_dir(tar: tarfile.TarFile, name: str) -> None:
    """Add a directory entry."""
    info = tarfile.TarInfo(name)
    info.type = tarfile.DIRTYPE
    info.mode = 0o755
    tar.addfile(info)


def add_link(tar: tarfile.TarFile, name: str, target: str, hard: bool = False) -> None:
    """Add a symlink or hard link entry."""
    info = tarfile.TarInfo(name)
    info.type = tarfile.LNKTYPE if hard else tarfile.SYMTYPE
    info.linkname = target
    tar.addfile(info)


def build_layer(
    files: dict[str, bytes] | None = None,
    directories: tuple[str, ...] = (),
    symlinks: dict[str, str] | None = None,
) -> bytes:
    """Build a gzip-compressed layer tar in memory."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name in directories:
            add_dir(tar, name)
        for name, content in (files or {}).items():
            add_file(tar, name, content)
        for name, target in (symlinks or {}).items():
            add_link(tar, name, target)
    return buffer.getvalue()


class FakeRegistry:
    """Token server, registry v2 and Docker Hub endpoints in one aiohttp app.

    Tokens are ``token-<repository>``; registry endpoints reject any other
    bearer value with 401.
    """

    def __init__(self) -> None:
        self.manifests: dict[tuple[str, str], Any] = {}
        self.blobs: dict[str, bytes] = {}
        self.blob_status: dict[str, int] = {}
        self.token_status = 200
        self.token_body: str | None = None
        self.search_pages: list[list[dict[str, Any]]] = []
        self.tags: dict[str, list[str]] = {}
        self.token_requests: list[dict[str, str]] = []
        self.manifest_requests: list[dict[str, str]] = []
        self.blob_requests: list[str] = []
        self.search_requests = 0

    def add_image(
        self,
        repository: str,
        tag: str,
        layers: list[bytes],
        digests: list[str] | None = None,
    ) -> list[str]:
        """Register an image and its layer blobs.

        Args:
            repository: Registry path (e.g. "library/nginx")
            tag: Tag name
            layers: Compressed layer bytes in manifest order
            digests: Digest to announce per layer (computed when omitted)

        Returns:
            Layer digests in manifest order
        """
        digests = digests or [calculate_digest(layer) for layer in layers]
        config = b'{"architecture": "amd64", "os": "linux"}'
        for digest, layer in zip(digests, layers):
            self.blobs[digest] = layer

        self.manifests[(repository, tag)] = {
            "schemaVersion": 2,
            "mediaType": MANIFEST_V2_MEDIA_TYPE,
            "config": {
                "mediaType": CONFIG_MEDIA_TYPE,
                "size": len(config),
                "digest": calculate_digest(config),
            },
            "layers": [
                {"mediaType": LAYER_MEDIA_TYPE, "size": len(layer), "digest": digest}
                for digest, layer in zip(digests, layers)
            ],
        }
        return digests

    def _authorized(self, request: web.Request) -> bool:
        repository = request.match_info["repo"]
        return request.headers.get("Authorization") == f"Bearer token-{repository}"

    async def handle_token(self, request: web.Request) -> web.Response:
        self.token_requests.append(dict(request.query))
        if self.token_status != 200:
            return web.Response(status=self.token_status, text="denied")
        if self.token_body is not None:
            return web.Response(text=self.token_body)
        repository = request.query["scope"].split(":")[1]
        return web.json_response({"token": f"token-{repository}"})

    async def handle_manifest(self, request: web.Request) -> web.Response:
        self.manifest_requests.append(dict(request.headers))
        if not self._authorized(request):
            return web.Response(status=401)
        key = (request.match_info["repo"], request.match_info["reference"])
        if key not in self.manifests:
            return web.json_response({"errors": [{"code": "MANIFEST_UNKNOWN"}]}, status=404)
        manifest = self.manifests[key]
        if isinstance(manifest, str):
            return web.Response(text=manifest, content_type="text/plain")
        return web.json_response(manifest, content_type=MANIFEST_V2_MEDIA_TYPE)

    async def handle_blob(self, request: web.Request) -> web.Response:
        digest = request.match_info["digest"]
        self.blob_requests.append(digest)
        if not self._authorized(request):
            return web.Response(status=401)
        if digest in self.blob_status:
            return web.Response(status=self.blob_status[digest])
        if digest not in self.blobs:
            return web.Response(status=404)
        return web.Response(body=self.blobs[digest], content_type="application/octet-stream")

    async def handle_search(self, request: web.Request) -> web.Response:
        self.search_requests += 1
        page = int(request.query.get("page", "1"))
        results = self.search_pages[page - 1] if page <= len(self.search_pages) else []
        next_url = None
        if page < len(self.search_pages):
            next_url = str(request.url.update_query(page=str(page + 1)))
        return web.json_response(
            {"count": sum(len(p) for p in self.search_pages), "next": next_url, "results": results}
        )

    async def handle_tags(self, request: web.Request) -> web.Response:
        repository = request.match_info["repo"]
        if repository not in self.tags:
            return web.Response(status=404)
        return web.json_response(
            {"count": len(self.tags[repository]), "results": [{"name": t} for t in self.tags[repository]]}
        )

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/token", self.handle_token)
        app.router.add_get("/v2/search/repositories", self.handle_search)
        app.router.add_get("/v2/repositories/{repo:.+}/tags", self.handle_tags)
        app.router.add_get("/v2/{repo:.+}/manifests/{reference}", self.handle_manifest)
        app.router.add_get("/v2/{repo:.+}/blobs/{digest}", self.handle_blob)
        return app


def search_page(start: int, count: int) -> list[dict[str, Any]]:
    """Build one page of Hub search results."""
    return [
        {
            "repo_name": f"user/repo-{i}",
            "short_description": f"repository {i}",
            "pull_count": i * 10,
            "star_count": i,
            "is_official": False,
        }
        for i in range(start, start + count)
    ]
