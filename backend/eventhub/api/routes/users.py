"""
User endpoints: register, list, lookup by email, delete.
"""

from fastapi import APIRouter, Depends, status

from eventhub.api.deps import get_user_directory
from eventhub.schemas.user import UserCreate, UserDeletedResponse, UserResponse
from eventhub.services.user_service import UserDirectory

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, directory: UserDirectory = Depends(get_user_directory)):
    """Register a user. Returns 409 if the email is already registered."""
    user = await directory.register(user_data)
    return UserResponse.model_validate(user)


@router.get("/", response_model=list[UserResponse])
async def list_users(directory: UserDirectory = Depends(get_user_directory)):
    return [UserResponse.model_validate(u) for u in await directory.list_users()]


@router.get("/{email}", response_model=UserResponse)
async def get_user(email: str, directory: UserDirectory = Depends(get_user_directory)):
    return UserResponse.model_validate(await directory.get(email))


@router.delete("/{user_id}", response_model=UserDeletedResponse)
async def delete_user(user_id: str, directory: UserDirectory = Depends(get_user_directory)):
    await directory.delete(user_id)
    return UserDeletedResponse(message="User deleted successfully")
