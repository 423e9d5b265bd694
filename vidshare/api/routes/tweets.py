"""
VidShare API - Tweet routes.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.deps import get_current_account
from vidshare.core.database import get_db
from vidshare.core.errors import NotFound, ValidationError, parse_id
from vidshare.models.models import Account, Tweet
from vidshare.schemas.schemas import ApiResponse, ContentBody, TweetCreate, TweetPage, TweetSchema
from vidshare.services.guards import assert_owner
from vidshare.services.query.pagination import PageParams, page_params
from vidshare.services.query.projection import ListQuery, OwnerProjection

router = APIRouter(prefix="/tweets", tags=["Tweets"])


def _content(body: ContentBody) -> str:
    content = (body.content or "").strip()
    if not content:
        raise ValidationError("Missing content! Tweet content is required")
    return content


async def _get_tweet(db: AsyncSession, tweet_id: str) -> Tweet:
    tweet = await db.get(Tweet, parse_id(tweet_id, "tweet"))
    if tweet is None:
        raise NotFound("Tweet not found")
    return tweet


def tweet_listing(owner_id, owner: OwnerProjection, descending: bool = True) -> ListQuery:
    """Tweets of one channel with the owner summary attached."""
    return (
        ListQuery(Tweet)
        .where(Tweet.owner_id == owner_id)
        .decorate(owner)
        .sort(Tweet.created_at, descending)
    )


@router.post("", response_model=ApiResponse, status_code=201)
async def create_tweet(
    body: TweetCreate,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    tweet = Tweet(content=_content(body), is_retweet=body.is_retweet, owner_id=account.id)
    db.add(tweet)
    await db.commit()
    return ApiResponse(status_code=201, data=TweetSchema.model_validate(tweet), message="Tweet created successfully")


@router.get("/user/{user_id}", response_model=ApiResponse)
async def get_user_tweets(
    user_id: str,
    page: PageParams = Depends(page_params),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    uid = parse_id(user_id, "user")
    if await db.get(Account, uid) is None:
        raise NotFound("User not found")

    owner = OwnerProjection(Tweet.owner_id)
    rows, total = await tweet_listing(uid, owner).fetch_page(db, page)
    return ApiResponse(
        status_code=200,
        data=TweetPage(
            tweets=[owner.decorate(TweetSchema, row[0], row) for row in rows],
            total_tweets=total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages(total),
        ),
        message="Tweets fetched successfully",
    )


@router.patch("/{tweet_id}", response_model=ApiResponse)
async def update_tweet(
    tweet_id: str,
    body: ContentBody,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    content = _content(body)
    tweet = await _get_tweet(db, tweet_id)
    assert_owner(tweet, account.id, "You are not authorized to update this tweet")

    tweet.content = content
    await db.commit()
    return ApiResponse(status_code=200, data=TweetSchema.model_validate(tweet), message="Tweet updated successfully")


@router.delete("/{tweet_id}", response_model=ApiResponse)
async def delete_tweet(
    tweet_id: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    tweet = await _get_tweet(db, tweet_id)
    assert_owner(tweet, account.id, "You are not authorized to delete this tweet")

    await db.delete(tweet)
    await db.commit()
    return ApiResponse(status_code=200, data={}, message="Tweet deleted successfully")
