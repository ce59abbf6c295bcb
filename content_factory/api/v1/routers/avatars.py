from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError

from content_factory.api.v1.dependencies import get_avatar_service, get_current_user_id, pagination
from content_factory.core.errors import NotFoundError
from content_factory.features.avatars.schemas import AvatarCreateIn, AvatarOut
from content_factory.features.avatars.services import AvatarService


router = APIRouter(
    prefix="/avatars",
    tags=["avatars"],
    responses={404: {"description": "Not Found"}},
)


@router.get("", summary="Lister mes avatars", response_model=List[AvatarOut])
def list_avatars(
    page: dict = Depends(pagination),
    user_id: str = Depends(get_current_user_id),
    svc: AvatarService = Depends(get_avatar_service),
):
    return svc.list(user_id, offset=page["offset"], limit=page["limit"])


@router.post(
    "",
    summary="Enregistrer un avatar HeyGen",
    status_code=status.HTTP_201_CREATED,
    response_model=AvatarOut,
    responses={409: {"description": "Avatar already registered"}},
)
def create_avatar(
    payload: AvatarCreateIn,
    user_id: str = Depends(get_current_user_id),
    svc: AvatarService = Depends(get_avatar_service),
):
    try:
        return svc.create(user_id, payload)
    except IntegrityError:
        svc.repo.session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Avatar already registered")


@router.get("/{avatar_id}", summary="Récupérer un avatar", response_model=AvatarOut)
def get_avatar(
    avatar_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: AvatarService = Depends(get_avatar_service),
):
    try:
        return svc.get(avatar_id, user_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Avatar not found")


@router.post("/{avatar_id}/default", summary="Définir l'avatar par défaut", response_model=AvatarOut)
def set_default_avatar(
    avatar_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: AvatarService = Depends(get_avatar_service),
):
    try:
        return svc.set_default(avatar_id, user_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Avatar not found")


@router.delete("/{avatar_id}", summary="Supprimer un avatar", status_code=status.HTTP_204_NO_CONTENT)
def delete_avatar(
    avatar_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: AvatarService = Depends(get_avatar_service),
):
    try:
        svc.delete(avatar_id, user_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Avatar not found")
