import pytest

from goosepage import Document
from goosepage.core.queryset import QuerySet
from goosepage.utils.exceptions import InvalidSort


class Article(Document):
    title: str
    category: str
    views: int = 0


class TestQuerySetBuilding:
    def test_find_returns_queryset(self):
        assert isinstance(Article.find(), QuerySet)

    def test_sort_parses_prefixes(self):
        qs = Article.find().sort("-views", "title")
        assert qs._sort == [("views", -1), ("title", 1)]

    def test_sort_rejects_bad_direction(self):
        with pytest.raises(InvalidSort):
            Article.find().sort(("views", 0))

    def test_immutability(self):
        """Chaining returns new instances, original is unchanged."""
        qs1 = Article.find(category="tech")
        qs2 = qs1.sort("-views")
        qs3 = qs2.limit(5).filter(views={"$gte": 1})

        assert qs1 is not qs2
        assert qs1._sort == []
        assert qs2._limit_count == 0
        assert qs3._limit_count == 5
        assert qs2._filter == {"category": "tech"}
        assert qs3._filter == {"category": "tech", "views": {"$gte": 1}}

    def test_select_always_includes_id(self):
        assert Article.find().select("title")._projection == {"title": 1, "_id": 1}


class TestQuerySetExecution:
    async def test_all_returns_list(self, mongo_connection):
        await Article.create(title="A1", category="tech", views=10)
        await Article.create(title="A2", category="science", views=20)
        assert len(await Article.find().all()) == 2

    async def test_first_returns_single(self, mongo_connection):
        await Article.create(title="First", category="tech")
        article = await Article.find(category="tech").first()
        assert article is not None
        assert article.title == "First"

    async def test_first_returns_none_when_empty(self, mongo_connection):
        assert await Article.find(category="nonexistent").first() is None

    async def test_count_and_exists(self, mongo_connection):
        await Article.create(title="A1", category="tech")
        await Article.create(title="A2", category="tech")
        await Article.create(title="A3", category="science")
        assert await Article.find(category="tech").count() == 2
        assert await Article.find(category="science").exists()
        assert not await Article.find(category="art").exists()

    async def test_filter_chaining(self, mongo_connection):
        await Article.create(title="A1", category="tech", views=100)
        await Article.create(title="A2", category="tech", views=5)
        await Article.create(title="A3", category="science", views=200)

        results = await Article.find(category="tech").filter(views={"$gte": 50}).all()
        assert [r.title for r in results] == ["A1"]

    async def test_sort_and_limit(self, mongo_connection):
        for i in range(5):
            await Article.create(title=f"Art{i}", category="tech", views=i)

        results = await Article.find().sort("-views").limit(2).all()
        assert [r.views for r in results] == [4, 3]

    async def test_async_iteration(self, mongo_connection):
        await Article.create(title="A1", category="tech")
        await Article.create(title="A2", category="tech")

        titles = [article.title async for article in Article.find().sort("title")]
        assert titles == ["A1", "A2"]

    async def test_select_projection(self, mongo_connection):
        await Article.create(title="Projected", category="tech", views=42)
        results = await Article.find().select("title", "category").all()
        assert results[0].title == "Projected"
        assert results[0].views == 0
