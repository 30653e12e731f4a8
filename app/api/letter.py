# app/api/letter.py

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import get_async_session
from app.schemas.commons_schemas import MessageResponse
from app.schemas.letter_schemas import (
    LetterCreateRequest,
    LetterListResponse,
    LetterResponse,
    LetterUpdateRequest,
    Pagination,
)
from app.services.document_service import document_service, DocumentRenderError, LetterNotApprovedError
from app.services.letter_service import letter_service, LetterNotFoundError, LetterValidationError
from app.utils.logger import logger

router = APIRouter(tags=["permission-letters"])

NOT_FOUND_MESSAGE = "Surat tidak ditemukan"


def verification_base_url(request: Request) -> str:
    """Base under which /verify/<payload> is served by this API."""
    return f"{str(request.base_url).rstrip('/')}/api"


@router.get("/permission-letters", response_model=LetterListResponse)
async def list_letters(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = "",
    status: str = "",
    session: AsyncSession = Depends(get_async_session),
):
    try:
        letters, total = await letter_service.list_letters(session, page, limit, search, status)
        return LetterListResponse(
            letters=[letter_service.to_response(letter) for letter in letters],
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                totalPages=(total + limit - 1) // limit,
            ),
        )
    except Exception as e:
        logger.error(f" Letter list failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch permission letters")


@router.post("/permission-letters", response_model=LetterResponse, status_code=201)
async def create_letter(request: LetterCreateRequest, session: AsyncSession = Depends(get_async_session)):
    try:
        letter = await letter_service.create_letter(session, request)
        return letter_service.to_response(letter)
    except LetterValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f" Letter creation failed: {e}")
        raise HTTPException(status_code=500, detail="Gagal menyimpan surat izin")


@router.get("/permission-letters/{letter_id}", response_model=LetterResponse)
async def get_letter(letter_id: str, session: AsyncSession = Depends(get_async_session)):
    try:
        letter = await letter_service.get_letter(session, letter_id)
        return letter_service.to_response(letter)
    except LetterNotFoundError:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    except Exception as e:
        logger.error(f" Letter fetch failed: {e}")
        raise HTTPException(status_code=500, detail="Gagal mengambil data surat")


@router.patch("/permission-letters/{letter_id}", response_model=LetterResponse)
@router.put("/permission-letters/{letter_id}", response_model=LetterResponse)
async def update_letter(
    letter_id: str,
    request: LetterUpdateRequest,
    session: AsyncSession = Depends(get_async_session),
):
    """Partial update, including approve/reject/pending transitions."""
    try:
        letter = await letter_service.update_letter(session, letter_id, request)
        return letter_service.to_response(letter)
    except LetterNotFoundError:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    except Exception as e:
        logger.error(f" Letter update failed: {e}")
        raise HTTPException(status_code=500, detail="Gagal memperbarui surat")


@router.delete("/permission-letters/{letter_id}", response_model=MessageResponse)
async def delete_letter(letter_id: str, session: AsyncSession = Depends(get_async_session)):
    try:
        await letter_service.delete_letter(session, letter_id)
        return MessageResponse(message="Surat berhasil dihapus")
    except LetterNotFoundError:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    except Exception as e:
        logger.error(f" Letter deletion failed: {e}")
        raise HTTPException(status_code=500, detail="Gagal menghapus surat")


@router.get("/permission-letters/{letter_id}/pdf")
async def download_letter_pdf(letter_id: str, request: Request, session: AsyncSession = Depends(get_async_session)):
    """Approved letter as a PDF carrying its validation code and QR."""
    try:
        letter = await letter_service.get_letter(session, letter_id)
        pdf_bytes, filename = document_service.build_letter_pdf(letter, verification_base_url(request))
    except LetterNotFoundError:
        raise HTTPException(status_code=404, detail="Letter not found")
    except LetterNotApprovedError:
        raise HTTPException(status_code=400, detail="Letter not approved yet")
    except DocumentRenderError as e:
        logger.error(f" PDF refused: {e}")
        raise HTTPException(status_code=400, detail="Letter cannot be validated")
    except Exception as e:
        logger.error(f" PDF generation failed: {e}")
        raise HTTPException(status_code=500, detail="Error generating PDF")

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename.replace("/", "-")}"',
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
            "Expires": "0",
        },
    )
