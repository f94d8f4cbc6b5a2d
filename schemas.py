# schemas.py
"""
Request bodies accepted by the REST routes, validated before they reach
the table service.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ColumnCreate(BaseModel):
    column_name: str = ""


class RowCreate(BaseModel):
    name: str = ""
    annotation: Optional[str] = ""


class CellUpdate(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    row_id: str  # row name, kept under the client's key
    column_name: str
    value: Optional[str] = ""


class AnnotationUpdate(BaseModel):
    row_id: str
    annotation: Optional[str] = ""


class RowRename(BaseModel):
    new_name: str = ""


class SnapshotRow(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str
    annotation: Optional[str] = ""
    attributes: Dict[str, Optional[str]] = Field(default_factory=dict)


class SnapshotData(BaseModel):
    columns: List[str]
    rows: List[SnapshotRow]


class ImportRequest(BaseModel):
    data: Optional[SnapshotData] = None


class AxisSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    x_positive: str = Field(alias="xPositive")
    x_negative: str = Field(alias="xNegative")
    y_positive: str = Field(alias="yPositive")
    y_negative: str = Field(alias="yNegative")


class PlotRequest(BaseModel):
    axes: AxisSettings
    rows: Optional[List[SnapshotRow]] = None


class LoginRequest(BaseModel):
    password: str = ""
