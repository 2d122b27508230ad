from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List, Optional, Union

Number = Union[int, float]

class Box(BaseModel):
    """
    Rectangle in percentages (0-100) of the template image.
    Values outside that range are kept; the renderer clamps them.
    """
    x: Number = 0
    y: Number = 0
    w: Number = 0
    h: Number = 0

class Slot(BaseModel):
    description: str = ""
    location: Box = Field(default_factory=Box)

class FormTemplate(BaseModel):
    name: str = Field(..., examples=["form1", "one-slot-form"])
    image: str = Field(default="", examples=["form1.png"])
    slots: List[Slot] = Field(default_factory=list)
    debug: Optional[bool] = Field(default=None, description="Renderer draws slot outlines when set")

class FormInstance(BaseModel):
    id: str
    form: str = Field(..., description="Name of the template this instance fills")
    contents: List[str] = Field(default_factory=list, description="One string per template slot")

class FormFileContents(BaseModel):
    """Logical document mirrored by the backing JSON file."""
    templates: List[FormTemplate] = Field(default_factory=list)
    instances: List[FormInstance] = Field(default_factory=list)

    def to_json(self) -> str:
        # absent debug flags stay absent in the file
        return self.model_dump_json(exclude_none=True, indent=2)
