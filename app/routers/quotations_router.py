# app/routers/quotations_router.py
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.quotation_schema import (
    QuotationDetailOut,
    QuotationUpdate,
    QuotationUpdateResponse,
    QuotationExportResponse,
    MessageResponse,
)
from app.services.quotation_service import (
    get_quotation,
    update_quotation,
    mark_quotation_exported,
    delete_quotation,
)
from app.services.report_service import (
    generate_quotation_xlsx,
    generate_quotation_pdf,
    XLSX_MEDIA_TYPE,
    PDF_MEDIA_TYPE,
)

router = APIRouter(prefix="/quotations", tags=["Quotations"])


def _attachment(content: bytes, filename: str, media_type: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# --------------------------
# GET SINGLE QUOTATION BY ID
# --------------------------
@router.get("/{quotation_id}", response_model=QuotationDetailOut)
async def get_quotation_route(quotation_id: int, db: AsyncSession = Depends(get_db)):
    return await get_quotation(db, quotation_id)


# --------------------------
# UPDATE QUOTATION (new revision)
# --------------------------
@router.put("/{quotation_id}", response_model=QuotationUpdateResponse)
async def update_quotation_route(
    quotation_id: int,
    data: QuotationUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await update_quotation(db, quotation_id, data)


# --------------------------
# MARK QUOTATION AS EXPORTED
# --------------------------
@router.put("/{quotation_id}/export", response_model=QuotationExportResponse)
async def export_quotation_route(quotation_id: int, db: AsyncSession = Depends(get_db)):
    return await mark_quotation_exported(db, quotation_id)


# --------------------------
# DELETE QUOTATION
# --------------------------
@router.delete("/{quotation_id}", response_model=MessageResponse)
async def delete_quotation_route(quotation_id: int, db: AsyncSession = Depends(get_db)):
    return await delete_quotation(db, quotation_id)


# --------------------------
# DOWNLOADS
# --------------------------
@router.get("/{quotation_id}/xlsx", response_class=Response)
async def download_quotation_xlsx(quotation_id: int, db: AsyncSession = Depends(get_db)):
    content, filename = await generate_quotation_xlsx(db, quotation_id)
    return _attachment(content, filename, XLSX_MEDIA_TYPE)


@router.get("/{quotation_id}/pdf", response_class=Response)
async def download_quotation_pdf(quotation_id: int, db: AsyncSession = Depends(get_db)):
    content, filename = await generate_quotation_pdf(db, quotation_id)
    return _attachment(content, filename, PDF_MEDIA_TYPE)
