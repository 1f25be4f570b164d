from typing import List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql import func

from blog_service import models, schemas
from blog_service.utils import make_excerpt, normalize_email, sanitize_string


# ----- Users -----

def get_users(db: Session, skip: int = 0, limit: int = 100) -> List[models.User]:
    return db.query(models.User).order_by(models.User.id).offset(skip).limit(limit).all()


def get_user_by_id(db: Session, user_id: int) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str, exclude_id: Optional[int] = None) -> Optional[models.User]:
    query = db.query(models.User).filter(models.User.email == normalize_email(email))
    if exclude_id is not None:
        query = query.filter(models.User.id != exclude_id)
    return query.first()


def create_user(db: Session, name: str, email: str, hashed_password: Optional[str] = None) -> models.User:
    db_user = models.User(
        name=sanitize_string(name),
        email=normalize_email(email),
        hashed_password=hashed_password,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info(f"Created user id={db_user.id} email={db_user.email}")
    return db_user


def update_user(db: Session, user: models.User, updated_user: schemas.UserUpdate) -> models.User:
    if updated_user.name:
        user.name = sanitize_string(updated_user.name)
    if updated_user.email:
        user.email = normalize_email(updated_user.email)
    if updated_user.bio is not None:
        user.bio = updated_user.bio
    if updated_user.avatar is not None:
        user.avatar = updated_user.avatar
    db.commit()
    db.refresh(user)
    logger.info(f"Updated user id={user.id}")
    return user


def update_user_profile(db: Session, user_id: int, updated_user: schemas.ProfileUpdate) -> Optional[models.User]:
    user = get_user_by_id(db, user_id)
    if not user:
        return None
    return update_user(db, user, schemas.UserUpdate(**updated_user.model_dump()))


def delete_user(db: Session, user: models.User) -> None:
    user_id = user.id
    db.delete(user)
    db.commit()
    logger.info(f"Deleted user id={user_id}")


# ----- Posts -----

def _posts_query(db: Session):
    return db.query(models.BlogPost).options(
        selectinload(models.BlogPost.author),
        selectinload(models.BlogPost.comments).selectinload(models.Comment.author),
        selectinload(models.BlogPost.likes),
    )


def get_posts(
    db: Session, skip: int = 0, limit: int = 100, author_id: Optional[int] = None
) -> List[models.BlogPost]:
    query = _posts_query(db)
    if author_id is not None:
        query = query.filter(models.BlogPost.author_id == author_id)
    return (
        query.order_by(models.BlogPost.created_at.desc(), models.BlogPost.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def get_post(db: Session, post_id: int) -> Optional[models.BlogPost]:
    return _posts_query(db).filter(models.BlogPost.id == post_id).first()


def create_post(db: Session, post: schemas.PostCreate, author_id: int) -> models.BlogPost:
    db_post = models.BlogPost(
        title=sanitize_string(post.title),
        content=post.content,
        excerpt=make_excerpt(post.content, post.excerpt),
        caption=post.caption,
        image=post.image,
        author_id=author_id,
    )
    db.add(db_post)
    db.commit()
    db.refresh(db_post)
    logger.info(f"Created post id={db_post.id} author_id={author_id}")
    return db_post


def update_post(db: Session, post: models.BlogPost, updated_post: schemas.PostUpdate) -> models.BlogPost:
    # empty values leave the stored field untouched
    title = sanitize_string(updated_post.title or "")
    if title:
        post.title = title
    if updated_post.content:
        post.content = updated_post.content
    if updated_post.excerpt:
        post.excerpt = updated_post.excerpt
    if updated_post.caption:
        post.caption = updated_post.caption
    if updated_post.image:
        post.image = updated_post.image
    post.updated_at = func.now()
    db.commit()
    db.refresh(post)
    logger.info(f"Updated post id={post.id}")
    return post


def delete_post(db: Session, post: models.BlogPost) -> None:
    post_id = post.id
    db.delete(post)
    db.commit()
    logger.info(f"Deleted post id={post_id}")


# ----- Comments -----

def get_post_comments(db: Session, post_id: int) -> List[models.Comment]:
    return (
        db.query(models.Comment)
        .options(selectinload(models.Comment.author))
        .filter(models.Comment.post_id == post_id)
        .order_by(models.Comment.created_at.desc(), models.Comment.id.desc())
        .all()
    )


def get_comment(db: Session, comment_id: int) -> Optional[models.Comment]:
    return db.query(models.Comment).filter(models.Comment.id == comment_id).first()


def create_comment(db: Session, content: str, post_id: int, author_id: int) -> models.Comment:
    db_comment = models.Comment(content=content.strip(), post_id=post_id, author_id=author_id)
    db.add(db_comment)
    db.commit()
    db.refresh(db_comment)
    logger.info(f"Created comment id={db_comment.id} post_id={post_id}")
    return db_comment


def update_comment(db: Session, comment: models.Comment, content: str) -> models.Comment:
    comment.content = content.strip()
    db.commit()
    db.refresh(comment)
    return comment


def delete_comment(db: Session, comment: models.Comment) -> None:
    comment_id = comment.id
    db.delete(comment)
    db.commit()
    logger.info(f"Deleted comment id={comment_id}")


# ----- Likes -----

def get_like(db: Session, post_id: int, user_id: int) -> Optional[models.Like]:
    return (
        db.query(models.Like)
        .filter(models.Like.post_id == post_id, models.Like.user_id == user_id)
        .first()
    )


def count_likes(db: Session, post_id: int) -> int:
    return db.query(models.Like).filter(models.Like.post_id == post_id).count()


def like_post(db: Session, post_id: int, user_id: int) -> int:
    if get_like(db, post_id, user_id) is None:
        db.add(models.Like(post_id=post_id, user_id=user_id))
        try:
            db.commit()
        except IntegrityError:
            # a concurrent request stored the same like first
            db.rollback()
        else:
            logger.info(f"User id={user_id} liked post id={post_id}")
    return count_likes(db, post_id)


def unlike_post(db: Session, post_id: int, user_id: int) -> int:
    like = get_like(db, post_id, user_id)
    if like is not None:
        db.delete(like)
        db.commit()
        logger.info(f"User id={user_id} unliked post id={post_id}")
    return count_likes(db, post_id)
