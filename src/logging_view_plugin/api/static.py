from starlette.responses import Response
from starlette.staticfiles import StaticFiles
from starlette.types import Scope

PLUGIN_ENTRY = "plugin-entry.js"

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Expires": "0",
}


class PluginStaticFiles(StaticFiles):
    """Front-end assets. The plugin entry point is never cached by the browser."""

    def __init__(self, directory: str):
        super().__init__(directory=directory, html=True, check_dir=False)

    async def get_response(self, path: str, scope: Scope) -> Response:
        response = await super().get_response(path, scope)
        if path.startswith(PLUGIN_ENTRY):
            response.headers.update(NO_CACHE_HEADERS)
        return response
