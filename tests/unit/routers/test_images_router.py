"""Unit tests for the image listing endpoint."""


def _populate(fake, count):
    for i in range(count):
        fake.add_image(f"wedding/photo-{i:02d}", minutes=i)


class TestListImages:
    def test_requires_session(self, client):
        assert client.get("/api/images").status_code == 401

    def test_first_page(self, guest_client, fake_cloudinary):
        _populate(fake_cloudinary, 15)

        response = guest_client.get("/api/images")

        assert response.status_code == 200
        body = response.json()
        assert len(body["images"]) == 12
        assert body["images"][0]["identifier"] == "wedding/photo-14"
        assert set(body["images"][0]) == {"identifier", "sourceUrl", "createdAt"}
        assert body["total"] == 15
        assert body["totalPages"] == 2
        assert body["currentPage"] == 1
        assert body["nextCursor"] is not None

    def test_next_cursor_gives_disjoint_page(self, guest_client, fake_cloudinary):
        _populate(fake_cloudinary, 15)
        first = guest_client.get("/api/images").json()

        second = guest_client.get(
            "/api/images", params={"cursor": first["nextCursor"]}
        ).json()

        first_ids = {image["identifier"] for image in first["images"]}
        second_ids = {image["identifier"] for image in second["images"]}
        assert len(second_ids) == 3
        assert not first_ids & second_ids
        assert second["currentPage"] == 2
        assert second["nextCursor"] is None

    def test_page_hint_is_echoed(self, guest_client, fake_cloudinary):
        _populate(fake_cloudinary, 40)
        first = guest_client.get("/api/images").json()

        body = guest_client.get(
            "/api/images", params={"cursor": first["nextCursor"], "page": 3}
        ).json()

        assert body["currentPage"] == 3

    def test_empty_gallery(self, guest_client):
        body = guest_client.get("/api/images").json()

        assert body["images"] == []
        assert body["total"] == 0
        assert body["totalPages"] == 0

    def test_upstream_failure_is_500(self, guest_client, fake_cloudinary):
        fake_cloudinary.search_down = True

        response = guest_client.get("/api/images")

        assert response.status_code == 500
        assert response.json() == {"error": "Error while fetching images"}
