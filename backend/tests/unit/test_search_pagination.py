from agora.domain.search import models, pagination


def _ranked(*pairs):
	candidates = [models.UserCandidate(user_id=f"id-{h}", handle=h, score_hint=s) for h, s in pairs]
	candidates.sort(key=pagination.search_order)
	return candidates


def test_ties_break_on_handle():
	ranked = _ranked(("carol", 0.5), ("alice", 0.5), ("bob", 0.9))
	assert [c.handle for c in ranked] == ["bob", "alice", "carol"]


def test_pages_cover_the_ranking_without_overlap():
	ranked = _ranked(*[(f"user{idx:02d}", 1.0 - idx * 0.05) for idx in range(12)])
	seen: list[str] = []
	cursor = None
	pages = 0
	while True:
		page = pagination.paginate(ranked, limit=5, after=cursor)
		pages += 1
		seen.extend(c.handle for c in page.items)
		if not page.has_more:
			assert page.next_cursor is None
			break
		assert page.next_cursor == page.items[-1].handle
		cursor = page.next_cursor
	assert pages == 3
	assert seen == [c.handle for c in ranked]


def test_has_more_is_exact_on_a_full_last_page():
	ranked = _ranked(*[(f"user{idx}", 0.5) for idx in range(5)])
	page = pagination.paginate(ranked, limit=5)
	assert len(page.items) == 5
	assert page.has_more is False
	assert page.next_cursor is None


def test_same_cursor_returns_same_page():
	ranked = _ranked(*[(f"user{idx:02d}", 0.5) for idx in range(9)])
	first = pagination.paginate(ranked, limit=5, after="user02")
	second = pagination.paginate(ranked, limit=5, after="user02")
	assert [c.handle for c in first.items] == [c.handle for c in second.items]
	assert [c.handle for c in first.items] == ["user03", "user04", "user05", "user06", "user07"]


def test_vanished_cursor_resumes_after_handle():
	ranked = _ranked(("dave", 0.9), ("alice", 0.8), ("erin", 0.7), ("bob", 0.6))
	page = pagination.paginate(ranked, limit=5, after="carol")
	assert [c.handle for c in page.items] == ["dave", "erin"]


def test_vanished_cursor_can_repeat_rows_served_earlier():
	ranked = _ranked(("dave", 0.9), ("alice", 0.8), ("erin", 0.7), ("bob", 0.6))
	first = pagination.paginate(ranked, limit=2)
	assert [c.handle for c in first.items] == ["dave", "alice"]

	remaining = [c for c in ranked if c.handle != first.next_cursor]
	second = pagination.paginate(remaining, limit=5, after=first.next_cursor)
	assert [c.handle for c in second.items] == ["dave", "erin", "bob"]


def test_suggestion_order_prefers_followers():
	candidates = [
		models.UserCandidate(user_id="1", handle="zed", followers_count=10),
		models.UserCandidate(user_id="2", handle="amy", followers_count=10),
		models.UserCandidate(user_id="3", handle="max", followers_count=500),
	]
	candidates.sort(key=pagination.suggestion_order)
	assert [c.handle for c in candidates] == ["max", "amy", "zed"]
