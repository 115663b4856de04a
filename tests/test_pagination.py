from services.pagination import Page


def test_meta_uses_response_field_names():
    page = Page(items=["a", "b"], total=5, page=2, limit=2)

    assert page.total_pages == 3
    assert page.meta() == {"total": 5, "totalPages": 3, "currentPage": 2, "count": 2}


def test_meta_for_empty_result():
    page = Page(items=[], total=0, page=1, limit=100)

    assert page.meta() == {"total": 0, "totalPages": 0, "currentPage": 1, "count": 0}
