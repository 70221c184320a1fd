from datetime import datetime, timedelta

import pytest

from domain.models import Book, User
from repositories import BooksRepository, UsersRepository


def _seed_user(session, user_id="u1"):
    return UsersRepository().create_user(
        session,
        User(id=user_id, name="Ann", email=f"{user_id}@example.com", access_token=f"token-{user_id}", password_hash="salt:key"),
    )


def _new_book(book_id: str, created_at: datetime) -> Book:
    return Book(
        id=book_id,
        title=f"Title {book_id}",
        genre="Fantasy",
        description="desc",
        author_id="u1",
        cover_image=f"https://cdn/{book_id}/cover.jpg",
        file=f"https://cdn/{book_id}/file.pdf",
        created_at=created_at,
        updated_at=created_at,
    )


def test_create_and_get_book(session_factory):
    repo = BooksRepository()
    with session_factory() as session:
        _seed_user(session)
        created = repo.create_book(session, _new_book("b1", datetime(2024, 1, 1)))
        fetched = repo.get_book(session, "b1")

    assert created.id == "b1"
    assert fetched == created
    assert fetched.author_id == "u1"


def test_get_missing_book_returns_none(session_factory):
    with session_factory() as session:
        assert BooksRepository().get_book(session, "missing") is None


def test_list_books_empty_and_ordered(session_factory):
    repo = BooksRepository()
    base = datetime(2024, 1, 1)
    with session_factory() as session:
        assert repo.list_books(session) == []
        _seed_user(session)
        repo.create_book(session, _new_book("late", base + timedelta(days=2)))
        repo.create_book(session, _new_book("early", base))
        ids = [b.id for b in repo.list_books(session)]

    assert ids == ["early", "late"]


def test_update_book_applies_partial_changes(session_factory):
    repo = BooksRepository()
    with session_factory() as session:
        _seed_user(session)
        repo.create_book(session, _new_book("b1", datetime(2024, 1, 1)))
        updated = repo.update_book(session, "b1", {"title": "New", "cover_image": "https://cdn/new.jpg"})

    assert updated.title == "New"
    assert updated.cover_image == "https://cdn/new.jpg"
    assert updated.genre == "Fantasy"
    assert updated.updated_at > datetime(2024, 1, 1)


def test_update_book_refuses_author_change(session_factory):
    repo = BooksRepository()
    with session_factory() as session:
        _seed_user(session)
        repo.create_book(session, _new_book("b1", datetime(2024, 1, 1)))
        with pytest.raises(ValueError):
            repo.update_book(session, "b1", {"author_id": "u2"})


def test_update_missing_book_returns_none(session_factory):
    with session_factory() as session:
        assert BooksRepository().update_book(session, "missing", {"title": "x"}) is None


def test_delete_book(session_factory):
    repo = BooksRepository()
    with session_factory() as session:
        _seed_user(session)
        repo.create_book(session, _new_book("b1", datetime(2024, 1, 1)))
        assert repo.delete_book(session, "b1") is True
        assert repo.get_book(session, "b1") is None
        assert repo.delete_book(session, "b1") is False


def test_users_lookup_by_token_and_email(session_factory):
    users = UsersRepository()
    with session_factory() as session:
        _seed_user(session, "u7")
        assert users.get_by_token(session, "token-u7").id == "u7"
        assert users.get_by_email(session, "u7@example.com").id == "u7"
        assert users.get_by_token(session, "nope") is None
