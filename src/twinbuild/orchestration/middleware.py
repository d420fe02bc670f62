"""
Development middleware composition.

Handlers follow the ``handler(request, response, next)`` convention: a
handler either responds itself or calls ``next()``, passing an error to
``next(error)`` when it fails.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

# next(error=None)
NextHandler = Callable[..., Any]
# handler(request, response, next)
RequestHandler = Callable[[Any, Any, NextHandler], Any]


@dataclass(frozen=True)
class AssetServerOptions:
    """Options for the asset-serving development handler."""

    # Only children for which this returns True are served
    filter: Callable[[Any], bool] = field(default=lambda config: True)
    no_info: bool = True
    quiet: bool = True
    lazy: bool = False
    stats_colors: bool = True
    server_side_render: bool = True
    public_path: str = "/"


@dataclass(frozen=True)
class HotUpdateOptions:
    """Options for the hot-update handler."""

    log: bool = False


@dataclass(frozen=True)
class MiddlewareFactories:
    """
    Constructors for the two development handlers.

    Each factory receives the engine instance and its options.
    """

    dev_server: Callable[[Any, AssetServerOptions], RequestHandler]
    hot_update: Callable[[Any, HotUpdateOptions], RequestHandler]


def chain_middleware(dev: RequestHandler, hot: RequestHandler) -> RequestHandler:
    """
    Compose the asset handler and the hot-update handler.

    The hot-update handler only runs for requests the asset handler passed
    on without an error; errors go straight to the host's ``next``.
    """

    def middleware(request: Any, response: Any, next_handler: NextHandler) -> Any:
        def after_dev(error: Optional[BaseException] = None) -> Any:
            if error is not None:
                return next_handler(error)
            return hot(request, response, next_handler)

        return dev(request, response, after_dev)

    return middleware
