from __future__ import annotations

from typing import Any

from methods_bridge.app.state.screen_state import ScreenState
from methods_bridge.bridge.registry import CapabilityRegistry, Placement
from methods_bridge.path_resolver import PathResolver, RootKind

DATA_ROOT = "dataRoot"
DOCUMENT_ROOT = "documentRoot"
GET_KEEP_SCREEN_ON = "getKeepScreenOn"
SET_KEEP_SCREEN_ON = "setKeepScreenOn"


def register_default_capabilities(
    registry: CapabilityRegistry, resolver: PathResolver, screen: ScreenState
) -> CapabilityRegistry:
    def _data_root(_arg: Any) -> str:
        return resolver.resolve_root(RootKind.DATA)

    def _document_root(_arg: Any) -> str:
        return resolver.resolve_root(RootKind.DOCUMENTS)

    def _get_keep_screen_on(_arg: Any) -> bool:
        return screen.keep_screen_on()

    def _set_keep_screen_on(arg: Any) -> None:
        if not isinstance(arg, bool):
            raise TypeError(f"{SET_KEEP_SCREEN_ON} expects a bool argument, got {type(arg).__name__}")
        screen.set_keep_screen_on(arg)

    registry.register(DATA_ROOT, _data_root, placement=Placement.WORKER)
    registry.register(DOCUMENT_ROOT, _document_root, placement=Placement.WORKER)
    registry.register(GET_KEEP_SCREEN_ON, _get_keep_screen_on, placement=Placement.INLINE)
    registry.register(SET_KEEP_SCREEN_ON, _set_keep_screen_on, placement=Placement.HOME)
    return registry
