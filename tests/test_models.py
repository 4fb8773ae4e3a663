"""Tests for request models and genre selection rules."""

import pydantic
import pytest

from exceptions import GenreLimitError, ValidationFailure
from models.genre_models import Genre, validate_genre_selection
from models.novel_models import CreateNovelModel, UpdateNovelModel
from models.register_model import RegisterUser
from models.update_profile_model import UpdateUserProfile

FOUR = ["Fantasy", "Horror", "War", "Poetry"]


class TestGenreSelection:
    def test_up_to_three_allowed(self):
        chosen = validate_genre_selection([Genre.WAR, Genre.TEEN, Genre.ACG])
        assert chosen == [Genre.WAR, Genre.TEEN, Genre.ACG]

    def test_repeats_collapse(self):
        assert validate_genre_selection([Genre.WAR, Genre.WAR]) == [Genre.WAR]

    def test_fourth_genre_rejected(self):
        with pytest.raises(GenreLimitError) as exc_info:
            validate_genre_selection([Genre(g) for g in FOUR])
        assert exc_info.value.selected == 4
        assert isinstance(exc_info.value, ValidationFailure)

    def test_vocabulary(self):
        assert Genre("LGBT+") is Genre.LGBT
        assert Genre("Sci-Fi") is Genre.SCI_FI
        assert len(Genre) == 23


class TestForms:
    def test_create_novel_with_four_genres(self):
        with pytest.raises(pydantic.ValidationError):
            CreateNovelModel(title="T", author="A", genre=FOUR, story="S")

    def test_create_novel_needs_a_genre(self):
        with pytest.raises(pydantic.ValidationError):
            CreateNovelModel(title="T", author="A", genre=[], story="S")

    def test_create_novel_defaults(self):
        novel = CreateNovelModel(title="T", author="A", genre=["Urban"], story="S")
        assert novel.leadingCharacter.value == "male"
        assert novel.novelCoverPage is None

    def test_update_novel_partial(self):
        update = UpdateNovelModel(title="New")
        assert update.model_dump(exclude_unset=True) == {"title": "New"}

    def test_update_novel_with_four_genres(self):
        with pytest.raises(pydantic.ValidationError):
            UpdateNovelModel(genre=FOUR)

    def test_register_with_four_genres(self):
        with pytest.raises(pydantic.ValidationError):
            RegisterUser(email="a@novelnest.io", password="secret1", username="a", interestedGenres=FOUR)

    def test_profile_edit_with_four_genres(self):
        with pytest.raises(pydantic.ValidationError):
            UpdateUserProfile(interestedGenres=FOUR)

    def test_unknown_genre(self):
        with pytest.raises(pydantic.ValidationError):
            UpdateUserProfile(interestedGenres=["Cooking"])
