"""
api/routes/v1/posts.py -- Blog post routes for the Inkwell REST API.

Routes (in registration order to avoid FastAPI path capture conflicts):
  POST   /posts            -- create post as the caller (requires auth)
  GET    /posts            -- published posts, newest first (public)
  GET    /posts/my-posts   -- all of the caller's posts, newest first (requires auth)
  GET    /posts/{post_id}  -- one post (public)
  PATCH  /posts/{post_id}  -- partial update (requires auth, author only)
  DELETE /posts/{post_id}  -- hard delete (requires auth, author only)

/posts/my-posts must be registered before /posts/{post_id}, otherwise
"my-posts" would be captured as a post_id and fail int validation.

Ownership is enforced in PostStore, not here. Routes pass the subject id
through; PostStore raises NotFoundError / ForbiddenError.
"""

from fastapi import APIRouter, Depends, Request

from api.models import MessageResponse, PostCreate, PostResponse, PostUpdate
from auth.dependencies import get_current_subject
from auth.models import Subject
from blog.store import PostStore

router = APIRouter()


# ---------------------------------------------------------------------------
# POST /posts -- create
# ---------------------------------------------------------------------------


@router.post("/posts", response_model=PostResponse, status_code=201)
def create_post(
    request: Request,
    body: PostCreate,
    subject: Subject = Depends(get_current_subject),
) -> PostResponse:
    """Create a post authored by the caller.

    The author comes from the verified token only; the request body has no
    author field to spoof.
    """
    store: PostStore = request.app.state.post_store
    return PostResponse.from_view(store.create_post(body.model_dump(), subject.id))


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@router.get("/posts", response_model=list[PostResponse])
def list_published(request: Request) -> list[PostResponse]:
    store: PostStore = request.app.state.post_store
    return [PostResponse.from_view(v) for v in store.list_published()]


@router.get("/posts/my-posts", response_model=list[PostResponse])
def list_my_posts(request: Request, subject: Subject = Depends(get_current_subject)) -> list[PostResponse]:
    """Return every post the caller authored, drafts included."""
    store: PostStore = request.app.state.post_store
    return [PostResponse.from_view(v) for v in store.list_by_author(subject.id)]


@router.get("/posts/{post_id}", response_model=PostResponse)
def get_post(request: Request, post_id: int) -> PostResponse:
    store: PostStore = request.app.state.post_store
    return PostResponse.from_view(store.get_post(post_id))


# ---------------------------------------------------------------------------
# Author-only writes
# ---------------------------------------------------------------------------


@router.patch("/posts/{post_id}", response_model=PostResponse)
def update_post(
    request: Request,
    post_id: int,
    body: PostUpdate,
    subject: Subject = Depends(get_current_subject),
) -> PostResponse:
    """Partially update a post. Only fields present in the body are applied."""
    store: PostStore = request.app.state.post_store
    fields = body.model_dump(exclude_unset=True)
    return PostResponse.from_view(store.update_post(post_id, fields, subject.id))


@router.delete("/posts/{post_id}", response_model=MessageResponse)
def delete_post(
    request: Request,
    post_id: int,
    subject: Subject = Depends(get_current_subject),
) -> MessageResponse:
    store: PostStore = request.app.state.post_store
    store.delete_post(post_id, subject.id)
    return MessageResponse(message=f"Post with ID {post_id} has been deleted")
