from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from app.common.exceptions import AppError
from app.core.dependencies import get_db, get_current_user_id
from app.models.category import CategoryType
from app.services.category_service import (
    get_categories,
    create_category,
    rename_category,
    delete_category
)
from app.schemas.category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    CategoryCreated,
)
from app.schemas.common import ApiResponse, MessageResponse
from app.logger_config import logger

router = APIRouter()


@router.get("", response_model=ApiResponse[List[CategoryResponse]])
def list_categories(
    type: Optional[CategoryType] = Query(None, description="Only income or only expense categories"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Get the user's default and custom categories, ordered by type then name.
    """
    categories = get_categories(db, user_id, category_type=type)
    return ApiResponse(data=[CategoryResponse.model_validate(c) for c in categories])


@router.post("", response_model=ApiResponse[CategoryCreated], status_code=status.HTTP_201_CREATED)
def create_category_route(
    category_data: CategoryCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Create a custom category.
    """
    try:
        category = create_category(db, user_id, category_data.name, category_data.type)
        return ApiResponse(data=CategoryCreated(id=category.id))
    except AppError:
        raise
    except Exception:
        logger.exception("Error creating category")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create category"
        )


@router.put("/{category_id}", response_model=ApiResponse[CategoryResponse])
def update_category_route(
    category_id: str,
    category_data: CategoryUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Rename a custom category. Default categories cannot be edited.
    """
    try:
        category = rename_category(db, user_id, category_id, category_data.name)
        return ApiResponse(data=CategoryResponse.model_validate(category))
    except AppError:
        raise
    except Exception:
        logger.exception("Error updating category")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update category"
        )


@router.delete("/{category_id}", response_model=ApiResponse[MessageResponse])
def delete_category_route(
    category_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Delete a custom category that no transaction uses.
    """
    try:
        delete_category(db, user_id, category_id)
        return ApiResponse(data=MessageResponse(message="Category deleted successfully"))
    except AppError:
        raise
    except Exception:
        logger.exception("Error deleting category")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete category"
        )
