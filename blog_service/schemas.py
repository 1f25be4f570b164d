from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class UserBase(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class UserCreate(UserBase):
    password: Optional[str] = None


class UserRegister(UserCreate):
    pass


class UserLogin(BaseModel):
    email: str
    password: str


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None


class UserResponse(BaseModel):
    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class UserProfile(UserResponse):
    avatar: Optional[str] = None
    bio: Optional[str] = None


class UserDeleted(BaseModel):
    message: str
    user: UserResponse


class CommentCreate(BaseModel):
    content: Optional[str] = None
    post_id: Optional[int] = None
    author_id: Optional[int] = None


class CommentUpdate(BaseModel):
    content: Optional[str] = None


class CommentResponse(BaseModel):
    id: int
    content: str
    post_id: int
    author_id: int
    created_at: datetime
    author: UserResponse

    model_config = {"from_attributes": True}


class PostCreate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    caption: Optional[str] = None
    image: Optional[str] = None
    author_id: Optional[int] = None


class PostUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    caption: Optional[str] = None
    image: Optional[str] = None


class PostResponse(BaseModel):
    id: int
    title: str
    content: str
    excerpt: str
    caption: Optional[str] = None
    image: Optional[str] = None
    author_id: int
    created_at: datetime
    updated_at: datetime
    author: UserResponse
    comments: List[CommentResponse] = []
    like_count: int = 0

    model_config = {"from_attributes": True}


class LikeStatus(BaseModel):
    post_id: int
    like_count: int
    liked: bool
