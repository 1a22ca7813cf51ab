from app.schemas.liteapi import HotelDetail, HotelImage

MAX_GALLERY_IMAGES = 10
# Gallery positions used when the first room has fewer than two photos
FALLBACK_GALLERY_INDICES = (2, 3)


def _image_url(image: HotelImage) -> str | None:
    return image.urlHd or image.url or None


def select_room_images(detail: HotelDetail | None) -> tuple[str | None, str | None]:
    """Pick two representative images, preferring the first room's photos."""
    if detail is None:
        return None, None

    picked: list[str] = []
    if detail.rooms:
        for photo in detail.rooms[0].photos[:2]:
            url = photo.hd_url or photo.url
            if url and url not in picked:
                picked.append(url)

    for index in FALLBACK_GALLERY_INDICES:
        if len(picked) >= 2:
            break
        if index < len(detail.hotelImages):
            url = _image_url(detail.hotelImages[index])
            if url and url not in picked:
                picked.append(url)

    picked += [None] * (2 - len(picked))
    return picked[0], picked[1]


def select_third_image(detail: HotelDetail | None) -> str | None:
    if detail is None or len(detail.hotelImages) < 3:
        return None
    return _image_url(detail.hotelImages[2])


def select_gallery_images(detail: HotelDetail | None, limit: int = MAX_GALLERY_IMAGES) -> list[str]:
    if detail is None:
        return []
    urls = [url for url in (_image_url(img) for img in detail.hotelImages) if url]
    return urls[:limit]
