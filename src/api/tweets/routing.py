import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlmodel import Session, col, select

from api.auth.utils import get_current_user
from api.db.models import Tweet, User, get_utc_now
from api.db.session import get_session
from api.ownership import get_or_404, get_owned_or_404
from api.responses import api_response
from api.utils import Page, parse_id

from .models import TweetContent, tweet_payload

logger = logging.getLogger("tweets")

router = APIRouter(tags=["tweets"])


def _list_tweets(db_session: Session, pager: Page, owner_id: Optional[str] = None) -> dict:
    conditions = [Tweet.owner_id == owner_id] if owner_id else []
    total = db_session.exec(select(func.count()).select_from(Tweet).where(*conditions)).one()
    rows = db_session.exec(
        select(Tweet, User)
        .join(User, User.id == Tweet.owner_id)
        .where(*conditions)
        .order_by(col(Tweet.created_at).desc(), col(Tweet.id))
        .offset(pager.offset)
        .limit(pager.limit)
    ).all()
    return pager.envelope(total, [tweet_payload(tweet, owner) for tweet, owner in rows])


@router.post("/")
def create_tweet(
    payload: TweetContent,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    tweet = Tweet(owner_id=current_user.id, content=payload.content)
    db_session.add(tweet)
    db_session.commit()
    db_session.refresh(tweet)

    logger.info(f"User {current_user.id} created tweet {tweet.id}")
    return api_response(tweet_payload(tweet, current_user), "Tweet created successfully", status_code=201)


@router.get("/")
def get_all_tweets(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db_session: Session = Depends(get_session),
):
    return api_response(_list_tweets(db_session, Page.from_query(page, limit)), "Tweets fetched successfully")


@router.get("/user/{user_id}")
def get_user_tweets(
    user_id: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    db_session: Session = Depends(get_session),
):
    user_id = parse_id(user_id, "user")
    get_or_404(db_session, User, user_id, "User")
    data = _list_tweets(db_session, Page.from_query(page, limit), owner_id=user_id)
    return api_response(data, "User tweets fetched successfully")


@router.patch("/{tweet_id}")
def update_tweet(
    tweet_id: str,
    payload: TweetContent,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    tweet_id = parse_id(tweet_id, "tweet")
    tweet = get_owned_or_404(db_session, Tweet, tweet_id, current_user, "Tweet", "update")

    tweet.content = payload.content
    tweet.updated_at = get_utc_now()
    db_session.add(tweet)
    db_session.commit()
    db_session.refresh(tweet)

    logger.info(f"User {current_user.id} updated tweet {tweet_id}")
    return api_response(tweet_payload(tweet, current_user), "Tweet updated successfully")


@router.delete("/{tweet_id}")
def delete_tweet(
    tweet_id: str,
    db_session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    tweet_id = parse_id(tweet_id, "tweet")
    tweet = get_owned_or_404(db_session, Tweet, tweet_id, current_user, "Tweet", "delete")

    db_session.delete(tweet)
    db_session.commit()

    logger.info(f"User {current_user.id} deleted tweet {tweet_id}")
    return api_response({}, "Tweet deleted successfully")
