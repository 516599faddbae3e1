"""Active-tool bookkeeping and pointer routing."""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from paintbar.errors import UnknownTool
from paintbar.geometry import Point
from paintbar.tools.base import Tool, ToolContext
from paintbar.tools.bucket import FillTool
from paintbar.tools.freehand import EraserTool, PencilTool, SprayTool
from paintbar.tools.selection import SelectionTool
from paintbar.tools.shapes import SHAPE_KINDS, ArcTool, ShapeTool
from paintbar.tools.text import TextTool

logger = logging.getLogger(__name__)

ToolListener = Callable[[str, Tool], None]


def build_tools(context: ToolContext) -> Dict[str, Tool]:
    tools: Dict[str, Tool] = {
        "pencil": PencilTool(context),
        "eraser": EraserTool(context),
        "spray": SprayTool(context),
        "fill": FillTool(context),
        "text": TextTool(context),
        "select": SelectionTool(context),
        "arc": ArcTool(context),
    }
    for kind in SHAPE_KINDS:
        tools[kind] = ShapeTool(context, kind)
    return tools


class ToolManager:
    def __init__(self, tools: Dict[str, Tool], default: Optional[str] = "pencil") -> None:
        self.tools = dict(tools)
        self.active_tool: Optional[Tool] = None
        self.active_name: Optional[str] = None
        self.overlay_interactive = False
        self.listeners: List[ToolListener] = []
        if default is not None:
            self.set_active_tool(default)

    def set_active_tool(self, name: str) -> Tool:
        tool = self.tools.get(name)
        if tool is None:
            logger.warning("Unknown tool requested: %s", name)
            raise UnknownTool(name)
        if self.active_tool is not None:
            self.active_tool.deactivate()
        self.active_tool = tool
        self.active_name = name
        tool.activate()
        self.overlay_interactive = tool.uses_overlay
        logger.debug("Active tool is now %s", name)
        for listener in list(self.listeners):
            listener(name, tool)
        return tool

    def pointer_down(self, point: Point) -> None:
        if self.active_tool is not None:
            self.active_tool.on_pointer_down(point)

    def pointer_move(self, point: Point) -> None:
        if self.active_tool is not None:
            self.active_tool.on_pointer_move(point)

    def pointer_up(self, point: Point) -> None:
        if self.active_tool is not None:
            self.active_tool.on_pointer_up(point)

    @property
    def gesture_active(self) -> bool:
        return self.active_tool is not None and self.active_tool.is_active_gesture

    def commit_pending(self) -> bool:
        if self.active_tool is None:
            return False
        return self.active_tool.commit()

    def cancel_pending(self) -> bool:
        if self.active_tool is None:
            return False
        return self.active_tool.cancel()
