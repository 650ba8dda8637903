import pytest
from sqlalchemy import column
from modbase.core.exceptions import InvalidFilterValueError
from modbase.repositories.blog.category_repository import CategoryRepository
from modbase.repositories.blog.post_repository import PostRepository
from modbase.repositories.filters import Filter, FilterBuilder, build_condition


def slugs(items):
    return sorted(item.slug for item in items)


class TestFilterBuilder:
    """Filter registration without a database"""

    def test_two_argument_form_means_equality(self):
        builder = FilterBuilder(filterable=["name"])
        assert builder.add("name", "Alpha") is True
        assert builder.filters["name"] == Filter(key="name", operator="=", value="Alpha")

    def test_non_filterable_key_is_ignored(self):
        builder = FilterBuilder(filterable=["name"])
        assert builder.add("password", "secret") is False
        assert len(builder) == 0

    @pytest.mark.parametrize("operator", ["in", "!in", "IN"])
    def test_list_operators_reject_scalars(self, operator):
        builder = FilterBuilder(filterable=["id"])
        with pytest.raises(InvalidFilterValueError):
            builder.add("id", operator, 5)

    def test_handler_receives_value_instead_of_filter(self):
        received = []
        builder = FilterBuilder(filterable=["search"], handlers={"search": received.append})
        builder.add("search", "python")
        assert received == ["python"]
        assert "search" not in builder.filters

    def test_later_filter_on_same_key_replaces_earlier(self):
        builder = FilterBuilder(filterable=["name"])
        builder.add("name", "Alpha")
        builder.add("name", "like", "B%")
        assert builder.filters["name"].operator == "like"

    def test_relationship_key_is_split(self):
        item = Filter(key="tags.slug", operator="=", value="python")
        assert item.relationship == "tags"
        assert item.field == "slug"

    def test_null_operators_ignore_value(self):
        assert str(build_condition(column("x"), "null", "ignored")) == "x IS NULL"
        assert str(build_condition(column("x"), "!NULL", "ignored")) == "x IS NOT NULL"

    def test_unknown_operator_passes_through(self):
        assert str(build_condition(column("x"), ">=", 3)) == "x >= :x_1"


@pytest.mark.asyncio
class TestRepositoryFilters:
    """Filters applied to real queries"""

    async def test_equality(self, session, blog):
        posts = await PostRepository(session).add_filter("name", "Alpha").all()
        assert slugs(posts) == ["alpha"]

    async def test_in_and_not_in(self, session, blog):
        ids = [blog["posts"]["alpha"].id, blog["posts"]["gamma"].id]
        assert slugs(await PostRepository(session).add_filter("id", "in", ids).all()) == ["alpha", "gamma"]
        assert slugs(await PostRepository(session).add_filter("id", "!in", ids).all()) == ["beta"]

    async def test_null_and_not_null(self, session, blog):
        without = await PostRepository(session).add_filter("category_id", "null", None).all()
        assert slugs(without) == ["gamma"]
        with_category = await PostRepository(session).add_filter("category_id", "!null", None).all()
        assert slugs(with_category) == ["alpha", "beta"]

    async def test_comparison_operator(self, session, blog):
        posts = await PostRepository(session).add_filter("id", ">", blog["posts"]["alpha"].id).all()
        assert slugs(posts) == ["beta", "gamma"]

    async def test_like_operator(self, session, blog):
        posts = await PostRepository(session).add_filter("name", "like", "%mm%").all()
        assert slugs(posts) == ["gamma"]

    async def test_default_filterable_active(self, session, blog):
        posts = await PostRepository(session).add_filter("active", True).all()
        assert slugs(posts) == ["alpha", "beta"]

    async def test_unknown_key_is_silently_ignored(self, session, blog):
        posts = await PostRepository(session).add_filter("body", "Draft").all()
        assert slugs(posts) == ["alpha", "beta", "gamma"]

    async def test_many_to_many_relationship_filter(self, session, blog):
        posts = await PostRepository(session).add_filter("tags.slug", "sql").all()
        assert slugs(posts) == ["beta"]

        posts = await PostRepository(session).add_filter("tags.slug", "in", ["python", "sql"]).all()
        assert slugs(posts) == ["alpha", "beta"]

    async def test_belongs_to_relationship_filter(self, session, blog):
        posts = await PostRepository(session).add_filter("category.slug", "news").all()
        assert slugs(posts) == ["alpha"]

    async def test_has_many_relationship_filter_ignores_trashed_related_rows(self, session, blog):
        categories = await CategoryRepository(session).add_filter("posts.slug", "delta").all()
        assert categories == []

        categories = await CategoryRepository(session).add_filter("posts.slug", "alpha").all()
        assert slugs(categories) == ["news"]

    async def test_search_handler(self, session, blog):
        posts = await PostRepository(session).add_filter("search", "python").all()
        assert slugs(posts) == ["alpha", "beta"]

    async def test_reset_clears_filters_and_sort(self, session, blog):
        repository = PostRepository(session).add_filter("name", "Alpha").sort("name", "asc")
        repository.reset()
        assert len(repository.filters) == 0
        assert repository.sort_by == "id"
        assert repository.sort_order == "desc"
        assert slugs(await repository.all()) == ["alpha", "beta", "gamma"]
