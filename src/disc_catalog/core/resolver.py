"""Barcode-driven metadata resolution.

Turns a scanned or typed barcode into a partially filled record by querying
public catalogs in a fixed order:

* CDs: MusicBrainz by barcode (literal, EAN-13 padded, UPC-A padded), then
  the Cover Art Archive and the release's track listing for the first hit.
* DVDs: UPCitemdb for the product title, then OMDb by the cleaned-up title.

Calls run one after another with fixed courtesy pauses. Every step is
captured as a Result so a failing source only means "nothing from here";
``resolve`` itself never raises and the user can always enter details by hand.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ..domain.barcode import barcode_variants, clean_barcode, is_lookup_candidate
from ..domain.lookup import LookupFailure, LookupResult, ResolvedFields
from ..domain.metadata import (
    available,
    extract_movie_title,
    first_genre,
    join_artist_credits,
    map_rating,
    parse_runtime,
    release_year,
    total_duration_minutes,
)
from ..domain.records import MediaKind
from ..domain.result import capture
from ..exceptions import ServiceUnavailableError
from ..infrastructure.external import (
    CoverArtArchiveAdapter,
    MusicBrainzAdapter,
    OmdbAdapter,
    UpcItemDbAdapter,
)
from ..models.config import LookupConfig

logger = logging.getLogger(__name__)

SleepFunction = Callable[[float], Awaitable[None]]

SHORT_BARCODE_MESSAGE = "Please enter a full barcode (at least 8 digits) to look it up."
CD_NOT_FOUND_MESSAGE = (
    "No CD information found for this barcode. It may not be in the MusicBrainz "
    "database yet. Please enter the details manually."
)
DVD_NOT_FOUND_MESSAGE = (
    "This barcode isn't in the available databases. "
    "Please enter the details manually from the DVD case."
)
LOOKUP_FAILED_MESSAGE = "Could not look up barcode. Please enter details manually."
RATING_DISCLAIMER = "Rating converted from a US classification; please verify it."


class MetadataResolver:
    """Resolves barcodes into record fields using the external catalogs."""

    def __init__(
        self,
        musicbrainz: MusicBrainzAdapter,
        cover_art: CoverArtArchiveAdapter,
        product_lookup: UpcItemDbAdapter,
        movie_catalog: OmdbAdapter,
        request_delay: float = 1.0,
        cover_art_delay: float = 0.5,
        sleep: Optional[SleepFunction] = None
    ):
        self.musicbrainz = musicbrainz
        self.cover_art = cover_art
        self.product_lookup = product_lookup
        self.movie_catalog = movie_catalog
        self.request_delay = request_delay
        self.cover_art_delay = cover_art_delay
        self._sleep = sleep or asyncio.sleep

    @classmethod
    def from_config(cls, config: LookupConfig) -> "MetadataResolver":
        user_agent = config.user_agent
        return cls(
            musicbrainz=MusicBrainzAdapter(config.musicbrainz_url, user_agent, config.timeout),
            cover_art=CoverArtArchiveAdapter(config.cover_art_url, user_agent, config.timeout),
            product_lookup=UpcItemDbAdapter(config.upcitemdb_url, user_agent, config.timeout),
            movie_catalog=OmdbAdapter(config.omdb_api_key, config.omdb_url, user_agent, config.timeout),
            request_delay=config.request_delay,
            cover_art_delay=config.cover_art_delay,
        )

    async def resolve(self, barcode: str, kind: MediaKind) -> LookupResult:
        """Look a barcode up and return whatever fields the catalogs provide."""
        barcode = clean_barcode(barcode)
        if not is_lookup_candidate(barcode):
            return LookupResult.miss(barcode, LookupFailure.NOT_FOUND, SHORT_BARCODE_MESSAGE)

        logger.info(f"Looking up {kind.label} barcode {barcode}")
        try:
            if kind is MediaKind.CD:
                return await self._resolve_audio(barcode)
            return await self._resolve_video(barcode)
        except Exception as e:
            logger.exception(f"Unexpected error looking up barcode {barcode}: {e}")
            return LookupResult.miss(barcode, LookupFailure.ERROR, LOOKUP_FAILED_MESSAGE)

    async def _resolve_audio(self, barcode: str) -> LookupResult:
        variants = barcode_variants(barcode)
        attempted = []
        release = None

        for index, variant in enumerate(variants):
            attempted.append(variant)
            logger.debug(f"Trying barcode format: {variant}")

            outcome = await capture(self.musicbrainz.search_releases_by_barcode(variant))
            if outcome.is_failure():
                error = outcome.error()
                if isinstance(error, ServiceUnavailableError):
                    logger.warning(str(error))
                    return LookupResult.miss(
                        barcode,
                        LookupFailure.SERVICE_UNAVAILABLE,
                        str(error),
                        attempted=attempted,
                        source=self.musicbrainz.service_name,
                    )
                logger.warning(f"MusicBrainz lookup failed for barcode {variant}: {error}")
            elif outcome.value():
                release = outcome.value()[0]
                logger.debug(f"Found release with barcode: {variant}")
                break

            if index < len(variants) - 1:
                await self._sleep(self.request_delay)

        if release is None:
            logger.info(f"No releases found for barcode {barcode}; tried {', '.join(attempted)}")
            return LookupResult.miss(
                barcode,
                LookupFailure.NOT_FOUND,
                CD_NOT_FOUND_MESSAGE,
                attempted=attempted,
                source=self.musicbrainz.service_name,
            )

        fields = ResolvedFields(
            title=release.get("title") or None,
            primary_credit=join_artist_credits(release.get("artist-credit")),
            year=release_year(release.get("date")),
        )

        release_id = release.get("id")
        if release_id:
            fields.cover_url = await self._fetch_cover(release_id)
            fields.length_minutes = await self._fetch_duration(release_id)

        return LookupResult.hit(
            barcode,
            fields,
            source=self.musicbrainz.service_name,
            attempted=attempted,
            message=f"Found: {fields.title} by {fields.primary_credit or 'Unknown Artist'}",
        )

    async def _fetch_cover(self, release_id: str) -> Optional[str]:
        await self._sleep(self.cover_art_delay)
        outcome = await capture(self.cover_art.front_cover_url(release_id))
        if outcome.is_failure():
            logger.info(f"Cover art not available for {release_id}: {outcome.error()}")
            return None
        return outcome.value()

    async def _fetch_duration(self, release_id: str) -> Optional[int]:
        await self._sleep(self.request_delay)
        outcome = await capture(self.musicbrainz.get_release(release_id))
        if outcome.is_failure():
            logger.info(f"Duration not available for {release_id}: {outcome.error()}")
            return None
        details = outcome.value()
        if not details:
            return None
        return total_duration_minutes(details.get("media"))

    async def _resolve_video(self, barcode: str) -> LookupResult:
        def not_found() -> LookupResult:
            return LookupResult.miss(
                barcode,
                LookupFailure.NOT_FOUND,
                DVD_NOT_FOUND_MESSAGE,
                attempted=[barcode],
            )

        product = await capture(self.product_lookup.product_title(barcode))
        if product.is_failure():
            logger.info(f"UPC lookup failed for {barcode}: {product.error()}")
            return not_found()
        if not product.value():
            return not_found()

        movie_title, search_year = extract_movie_title(product.value())
        if not movie_title:
            return not_found()
        logger.debug(f"Product title {product.value()!r} -> {movie_title!r} ({search_year or 'no year'})")

        if not self.movie_catalog.is_configured:
            logger.warning("No OMDb API key configured; skipping movie lookup")
            return not_found()

        movie = await capture(self.movie_catalog.find_movie(movie_title, search_year))
        if movie.is_failure():
            logger.info(f"OMDb lookup failed for {movie_title!r}: {movie.error()}")
            return not_found()
        if not movie.value():
            return not_found()

        data = movie.value()
        source_rating = available(data.get("Rated"))
        plot = available(data.get("Plot"))

        fields = ResolvedFields(
            title=available(data.get("Title")),
            primary_credit=available(data.get("Director")),
            year=release_year(data.get("Year")),
            genre=first_genre(data.get("Genre")),
            length_minutes=parse_runtime(data.get("Runtime")),
            cover_url=available(data.get("Poster")),
            rating=map_rating(source_rating),
            notes=f"{plot}\n\nUS Rating: {source_rating or 'N/A'}" if plot else None,
        )

        return LookupResult.hit(
            barcode,
            fields,
            source=self.movie_catalog.service_name,
            message=(
                f"{fields.title} ({fields.year})\nDirected by {fields.primary_credit or 'Unknown'}"
                f"\n\n{RATING_DISCLAIMER}"
            ),
        )
