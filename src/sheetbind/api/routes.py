"""API routes for SheetBind.

The service is stateless: every request carries a snapshot of the workbook,
either as columns or as CSV text per sheet, and the updated columns are sent
back when results are injected.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, model_validator

from ..errors import BindingError
from ..inputs import extract_input_values
from ..mapping import InputMapping, compute_input_mapping
from ..outline import Outline, TensorResult
from ..results import populate_results, reset_results
from ..sheets import InMemorySpreadsheet
from ..sheets.models import Columns
from ..tables import identify_tables

logger = logging.getLogger(__name__)

router = APIRouter()


class WorkbookRequest(BaseModel):
    """A workbook snapshot, given as columns or as CSV text per sheet."""

    sheets: Optional[dict[str, Columns]] = None
    csvs: Optional[dict[str, str]] = None

    @model_validator(mode="after")
    def _check_source(self) -> "WorkbookRequest":
        if (self.sheets is None) == (self.csvs is None):
            raise ValueError("Exactly one of 'sheets' or 'csvs' must be set")
        return self

    def to_spreadsheet(self) -> InMemorySpreadsheet:
        if self.sheets is not None:
            return InMemorySpreadsheet.for_columns(self.sheets)
        return InMemorySpreadsheet.for_csvs(self.csvs)


class MappingRequest(WorkbookRequest):
    """Request to bind an outline to the workbook's tables."""

    outline: Outline


class InputsRequest(WorkbookRequest):
    """Request to extract inputs, from an outline or a precomputed mapping."""

    outline: Optional[Outline] = None
    mapping: Optional[InputMapping] = None

    @model_validator(mode="after")
    def _check_binding(self) -> "InputsRequest":
        if self.outline is None and self.mapping is None:
            raise ValueError("One of 'outline' or 'mapping' must be set")
        return self


class ResultsRequest(InputsRequest):
    """Request to write solver results into the workbook."""

    results: list[TensorResult] = Field(default_factory=list)
    reset: bool = False


def _resolve_mapping(request: InputsRequest, spreadsheet: InMemorySpreadsheet) -> InputMapping:
    if request.mapping is not None:
        return request.mapping
    return compute_input_mapping(identify_tables(spreadsheet), request.outline)


# Health check


@router.get("/health")
async def health_check():
    """Health check endpoint with non-secret configuration."""
    from ..config import settings

    config = {
        "google_credentials_configured": settings.google_credentials_path.exists(),
        "table_header_rows": settings.table_header_rows,
        "max_snapshot_cells": settings.max_snapshot_cells,
    }

    return {
        "status": "ok",
        "service": "sheetbind",
        "config": config,
    }


# Binding endpoints


@router.post("/tables")
async def detect_tables(request: WorkbookRequest):
    """Detect the tables of a workbook."""
    try:
        tables = identify_tables(request.to_spreadsheet())
    except BindingError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"tables": [t.model_dump(mode="json") for t in tables]}


@router.post("/mapping")
async def map_outline(request: MappingRequest):
    """Bind a model outline to the workbook's tables."""
    try:
        spreadsheet = request.to_spreadsheet()
        mapping = compute_input_mapping(identify_tables(spreadsheet), request.outline)
    except BindingError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return mapping.model_dump(mode="json")


@router.post("/inputs")
async def extract_inputs(request: InputsRequest):
    """Extract dimension items, parameters and pinned variables."""
    try:
        spreadsheet = request.to_spreadsheet()
        values = extract_input_values(_resolve_mapping(request, spreadsheet), spreadsheet)
    except BindingError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return values.model_dump(mode="json", by_alias=True)


@router.post("/results")
async def inject_results(request: ResultsRequest):
    """Write results into the workbook, or clear them, and return its columns."""
    try:
        spreadsheet = request.to_spreadsheet()
        mapping = _resolve_mapping(request, spreadsheet)
        if request.reset:
            patches = reset_results(mapping, spreadsheet)
        else:
            patches = populate_results(request.results, mapping, spreadsheet)
    except BindingError as e:
        raise HTTPException(status_code=422, detail=str(e))
    logger.info(f"Applied {len(patches)} patch(es) to workbook")
    return {
        "sheets": {s: spreadsheet.to_columns(s) for s in spreadsheet.active_sheets()},
        "patch_count": len(patches),
    }
