from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from blog_service import auth, crud, models, schemas
from blog_service.database import get_db, init_db
from blog_service.log_config import setup_logging
from blog_service.settings import settings
from blog_service.utils import sanitize_string, validate_user_data

app = FastAPI(title="Blog Service")

instrumentator = Instrumentator()
instrumentator.instrument(app).expose(app)


@app.on_event("startup")
async def startup_event():
    setup_logging(settings.LOG_LEVEL)
    init_db()
    logger.info(f"Blog service instance {settings.INSTANCE_ID} started")


# ----- Error handlers -----

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = "Invalid request"
    if errors:
        err = errors[0]
        # body parse errors carry a character offset, not a field name
        field = ".".join(p for p in err.get("loc", ())[1:] if isinstance(p, str))
        detail = f"{field}: {err.get('msg')}" if field else err.get("msg", detail)
    logger.warning(f"{request.method} {request.url.path} rejected: {detail}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request: Request, exc: IntegrityError):
    logger.warning(f"{request.method} {request.url.path} integrity error: {exc.orig}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Resource conflicts with an existing record"},
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.opt(exception=exc).error(f"{request.method} {request.url.path} database error")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _blank_title(value: Optional[str]) -> bool:
    return value is None or not sanitize_string(value)


# ----- Auth -----

@app.post("/api/auth/register", response_model=schemas.UserResponse)
def register_user(user: schemas.UserRegister, response: Response, db: Session = Depends(get_db)):
    if _blank(user.name) or _blank(user.email) or not user.password:
        raise HTTPException(status_code=400, detail="Name, email, and password are required")
    error = validate_user_data(user.name, user.email)
    if error:
        raise HTTPException(status_code=400, detail=error)
    if crud.get_user_by_email(db, user.email):
        raise HTTPException(status_code=400, detail="Email already in use")
    new_user = crud.create_user(db, user.name, user.email, auth.hash_password(user.password))
    auth.set_session_cookie(response, new_user)
    return new_user


@app.post("/api/auth/login", response_model=schemas.UserResponse)
def login(user: schemas.UserLogin, response: Response, db: Session = Depends(get_db)):
    user_in_db = auth.authenticate_user(db, user.email, user.password)
    if not user_in_db:
        logger.info(f"Failed login for {user.email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")
    auth.set_session_cookie(response, user_in_db)
    return user_in_db


@app.post("/api/auth/logout")
def logout(response: Response):
    auth.clear_session_cookie(response)
    return {"success": True}


@app.get("/api/auth/me", response_model=Optional[schemas.UserProfile])
def get_session_user(current_user: Optional[models.User] = Depends(auth.get_optional_user)):
    return current_user


# ----- Users -----

@app.get("/api/users", response_model=List[schemas.UserResponse])
def get_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return crud.get_users(db, skip=skip, limit=limit)


@app.post("/api/users", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(user: schemas.UserCreate, db: Session = Depends(get_db)):
    if _blank(user.name) or _blank(user.email):
        raise HTTPException(status_code=400, detail="Name and email are required")
    error = validate_user_data(user.name, user.email)
    if error:
        raise HTTPException(status_code=400, detail=error)
    if crud.get_user_by_email(db, user.email):
        raise HTTPException(status_code=409, detail="Email already exists")
    hashed_password = auth.hash_password(user.password) if user.password else None
    return crud.create_user(db, user.name, user.email, hashed_password)


@app.get("/api/users/me", response_model=schemas.UserProfile)
def get_profile(current_user: models.User = Depends(auth.get_current_user)):
    return current_user


@app.put("/api/users/me", response_model=schemas.UserProfile)
def update_profile(
    updated_user: schemas.ProfileUpdate,
    current_user: models.User = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
):
    error = validate_user_data(name=updated_user.name)
    if error:
        raise HTTPException(status_code=400, detail=error)
    updated_user_data = crud.update_user_profile(db, user_id=current_user.id, updated_user=updated_user)
    if not updated_user_data:
        raise HTTPException(status_code=404, detail="User not found")
    return updated_user_data


@app.get("/api/users/{user_id}", response_model=schemas.UserResponse)
def get_user_by_id(user_id: int, db: Session = Depends(get_db)):
    user = crud.get_user_by_id(db, user_id=user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@app.put("/api/users/{user_id}", response_model=schemas.UserResponse)
def update_user(user_id: int, updated_user: schemas.UserUpdate, db: Session = Depends(get_db)):
    if not any(updated_user.model_dump().values()):
        raise HTTPException(status_code=400, detail="At least one field must be provided")
    error = validate_user_data(updated_user.name, updated_user.email or None)
    if error:
        raise HTTPException(status_code=400, detail=error)
    user = crud.get_user_by_id(db, user_id=user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    if updated_user.email and crud.get_user_by_email(db, updated_user.email, exclude_id=user_id):
        raise HTTPException(status_code=409, detail="Email already exists")
    return crud.update_user(db, user, updated_user)


@app.delete("/api/users/{user_id}", response_model=schemas.UserDeleted)
def delete_user(user_id: int, db: Session = Depends(get_db)):
    user = crud.get_user_by_id(db, user_id=user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    deleted = schemas.UserResponse.model_validate(user)
    crud.delete_user(db, user)
    return {"message": "User deleted successfully", "user": deleted}


@app.get("/api/users/{user_id}/posts", response_model=List[schemas.PostResponse])
def get_user_posts(
    user_id: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    if crud.get_user_by_id(db, user_id=user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    return crud.get_posts(db, skip=skip, limit=limit, author_id=user_id)


# ----- Posts -----

@app.get("/api/posts", response_model=List[schemas.PostResponse])
def get_posts(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    author_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    return crud.get_posts(db, skip=skip, limit=limit, author_id=author_id)


@app.post("/api/posts", response_model=schemas.PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    post: schemas.PostCreate,
    db: Session = Depends(get_db),
    current_user: Optional[models.User] = Depends(auth.get_optional_user),
):
    author_id = post.author_id or (current_user.id if current_user else None)
    if _blank_title(post.title) or _blank(post.content) or not author_id:
        raise HTTPException(status_code=400, detail="Title, content, and author_id are required")
    if crud.get_user_by_id(db, user_id=author_id) is None:
        raise HTTPException(status_code=404, detail="Author not found")
    return crud.create_post(db, post, author_id=author_id)


@app.get("/api/posts/{post_id}", response_model=schemas.PostResponse)
def get_post(post_id: int, db: Session = Depends(get_db)):
    post = crud.get_post(db, post_id=post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@app.put("/api/posts/{post_id}", response_model=schemas.PostResponse)
def update_post(post_id: int, updated_post: schemas.PostUpdate, db: Session = Depends(get_db)):
    post = crud.get_post(db, post_id=post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return crud.update_post(db, post, updated_post)


@app.delete("/api/posts/{post_id}", response_model=schemas.PostResponse)
def delete_post(post_id: int, db: Session = Depends(get_db)):
    post = crud.get_post(db, post_id=post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    deleted = schemas.PostResponse.model_validate(post)
    crud.delete_post(db, post)
    return deleted


@app.get("/api/posts/{post_id}/comments", response_model=List[schemas.CommentResponse])
def get_post_comments(post_id: int, db: Session = Depends(get_db)):
    if crud.get_post(db, post_id=post_id) is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return crud.get_post_comments(db, post_id=post_id)


# ----- Likes -----

@app.post("/api/posts/{post_id}/like", response_model=schemas.LikeStatus)
def like_post(
    post_id: int,
    current_user: models.User = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
):
    if crud.get_post(db, post_id=post_id) is None:
        raise HTTPException(status_code=404, detail="Post not found")
    like_count = crud.like_post(db, post_id=post_id, user_id=current_user.id)
    return {"post_id": post_id, "like_count": like_count, "liked": True}


@app.delete("/api/posts/{post_id}/like", response_model=schemas.LikeStatus)
def unlike_post(
    post_id: int,
    current_user: models.User = Depends(auth.get_current_user),
    db: Session = Depends(get_db),
):
    if crud.get_post(db, post_id=post_id) is None:
        raise HTTPException(status_code=404, detail="Post not found")
    like_count = crud.unlike_post(db, post_id=post_id, user_id=current_user.id)
    return {"post_id": post_id, "like_count": like_count, "liked": False}


# ----- Comments -----

@app.post("/api/comments", response_model=schemas.CommentResponse, status_code=status.HTTP_201_CREATED)
def create_comment(
    comment: schemas.CommentCreate,
    db: Session = Depends(get_db),
    current_user: Optional[models.User] = Depends(auth.get_optional_user),
):
    author_id = comment.author_id or (current_user.id if current_user else None)
    if _blank(comment.content) or not author_id or not comment.post_id:
        raise HTTPException(status_code=400, detail="Content, author_id, and post_id are required")
    if crud.get_post(db, post_id=comment.post_id) is None:
        raise HTTPException(status_code=404, detail="Post not found")
    if crud.get_user_by_id(db, user_id=author_id) is None:
        raise HTTPException(status_code=404, detail="Author not found")
    return crud.create_comment(db, comment.content, post_id=comment.post_id, author_id=author_id)


@app.put("/api/comments/{comment_id}", response_model=schemas.CommentResponse)
def update_comment(comment_id: int, updated_comment: schemas.CommentUpdate, db: Session = Depends(get_db)):
    if _blank(updated_comment.content):
        raise HTTPException(status_code=400, detail="Content is required")
    comment = crud.get_comment(db, comment_id=comment_id)
    if comment is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    return crud.update_comment(db, comment, updated_comment.content)


@app.delete("/api/comments/{comment_id}", response_model=schemas.CommentResponse)
def delete_comment(comment_id: int, db: Session = Depends(get_db)):
    comment = crud.get_comment(db, comment_id=comment_id)
    if comment is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    deleted = schemas.CommentResponse.model_validate(comment)
    crud.delete_comment(db, comment)
    return deleted


# ----- Service -----

@app.get("/status")
def service_status():
    return {"status": f"Blog service instance {settings.INSTANCE_ID} is running"}


@app.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check failed")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "database": "unavailable"},
        )
    return {"status": "healthy", "database": "connected"}


def run():
    import uvicorn

    uvicorn.run("blog_service.main:app", host="0.0.0.0", port=8000)
