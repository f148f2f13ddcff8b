"""Main Useless GPS application."""

import copy
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from .audio import Audio
from .config import CONFIG
from .errors import GeocodeNotFound, InsufficientInput, NoRouteDrawn, NoSamplesAvailable
from .geo import bearing_to_compass, distance_meters, initial_bearing, retry_with_backoff
from .logger import Logger
from .messages import compose_for_sample, compose_summary, embellish
from .models import Coordinate, Place, RouteAnalysis, SamplePlan
from .osm import NominatimGeocoder, OverpassClient
from .playback import PlaybackEngine, PlaybackEvent
from .proximity import associate
from .sampler import compute_sample_plan


@dataclass
class SessionState:
    """Everything known about the current route; replaced on every new route"""
    start: Place
    end: Place
    distance: float  # meters
    bearing: float  # degrees
    plan: SamplePlan
    analysis: RouteAnalysis
    summary: str


class UselessGPS:
    """Main application"""

    def __init__(self, geocoder=None, fetcher=None,
                 config: Optional[dict] = None,
                 logger: Optional[Logger] = None,
                 audio: Optional[Audio] = None,
                 rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], float]] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 snark: bool = False):
        self.config = config or CONFIG
        self.geocoder = geocoder or NominatimGeocoder(self.config)
        self.fetcher = fetcher or OverpassClient(self.config)
        self.logger = logger or Logger()
        self.audio = audio or Audio()
        self.rng = rng or random.Random()
        self.sleep = sleep
        self.snark = snark

        self.session: Optional[SessionState] = None
        self.playback = PlaybackEngine(
            config=self.config,
            clock=clock,
            rng=self.rng,
            logger=self.logger,
            on_event=self._on_playback_event,
        )

    def say(self, text: str):
        if self.snark:
            text = embellish(text, self.rng)
        self.audio.speak(text)

    def _on_playback_event(self, event: PlaybackEvent):
        self.say(event.message)

    def _geocode(self, name: str) -> Optional[Place]:
        try:
            place = self.geocoder.geocode(name)
        except (requests.RequestException, KeyError, ValueError) as e:
            self.logger.log("Geocoding error", {"query": name, "error": str(e)})
            return None
        if place:
            self.logger.log("Geocoded", {"query": name, "lat": place.coordinate.lat,
                                         "lon": place.coordinate.lon, "name": place.name})
        else:
            self.logger.log("Geocoding found nothing", {"query": name})
        return place

    def go(self, start_name: Optional[str], dest_name: Optional[str]) -> SessionState:
        """Geocode both names, draw the line and analyse it"""
        start_name = (start_name or "").strip()
        dest_name = (dest_name or "").strip()
        if not start_name or not dest_name:
            raise InsufficientInput()

        self.logger.log("Geocoding", {"start": start_name, "dest": dest_name})
        start = self._geocode(start_name)
        dest = self._geocode(dest_name)
        missing = [name for name, place in ((start_name, start), (dest_name, dest)) if not place]
        if missing:
            raise GeocodeNotFound(missing)

        return self.go_places(start, dest)

    def go_coordinates(self, start: Optional[Coordinate], end: Optional[Coordinate]) -> SessionState:
        if start is None or end is None:
            raise InsufficientInput()
        return self.go_places(Place(start, "Start"), Place(end, "Dest"))

    def go_places(self, start: Place, end: Place) -> SessionState:
        """Analyse the line between two places.

        Returns a detached copy of the new session; playback keeps reading
        the original.
        """
        # Samples are about to be replaced, so a running playback must stop first
        self.playback.cancel()
        self.session = None

        meters = distance_meters(start.coordinate, end.coordinate)
        bearing = initial_bearing(start.coordinate, end.coordinate)
        plan = compute_sample_plan(start.coordinate, end.coordinate, self.config)
        self.logger.log("Route plotted", {
            "start": start.name, "end": end.name,
            "distance": round(meters, 1), "bearing": round(bearing, 1),
        })
        self.logger.log("Sampling", {"samples": plan.count, "radius": round(plan.radius, 1)})

        analysis = self.analyze_path(plan)
        summary = compose_summary(analysis.global_flags, meters, analysis.error)
        self.session = SessionState(
            start=start, end=end, distance=meters, bearing=bearing,
            plan=plan, analysis=analysis, summary=summary,
        )
        self.say(summary)
        return copy.deepcopy(self.session)

    def analyze_path(self, plan: SamplePlan) -> RouteAnalysis:
        """Fetch features around the samples and tag the samples with them.

        A failed fetch yields an analysis with error set and no samples.
        """
        def try_fetch():
            try:
                result = self.fetcher.fetch_features(plan.points, plan.radius)
            except Exception as e:
                self.logger.log("Feature fetch failed", {"error": str(e), "type": type(e).__name__})
                return None
            self.logger.log("Features fetched", {"features": len(result.features)})
            return result

        result = retry_with_backoff(
            try_fetch,
            max_time=self.config["fetch_retry_max_time"],
            initial_delay=1.0,
            max_delay=4.0,
            description="feature fetch",
            log=self.logger.log,
            sleep=self.sleep,
        )
        if result is None:
            return RouteAnalysis.failed()

        samples, global_flags = associate(plan.points, plan.radius, result.features)
        self.logger.log("Analysis complete", {
            "flags": [c.value for c, hit in global_flags.items() if hit],
            "samples_with_hits": sum(1 for s in samples if s.hits),
        })
        return RouteAnalysis(
            global_flags=global_flags,
            error=False,
            samples=tuple(samples),
            raw_features=tuple(result.features),
            radius=plan.radius,
        )

    def simulate(self, run: bool = True) -> int:
        """Start playback along the current route.

        With run=False the caller drives playback.tick() itself.
        """
        if self.session is None:
            raise NoRouteDrawn()
        analysis = self.session.analysis
        if analysis.error or not analysis.samples:
            raise NoSamplesAvailable()

        run_id = self.playback.start(
            self.session.start.coordinate,
            self.session.end.coordinate,
            analysis.samples,
            analysis.radius,
        )
        if run:
            self.playback.run(sleep=self.sleep)
        return run_id

    def reset(self):
        self.playback.cancel()
        self.session = None
        self.logger.log("Reset.")

    def route_info(self) -> tuple[str, str]:
        """Distance and bearing lines for display"""
        if self.session is None:
            return "Distance: -", "Bearing: -"
        meters = self.session.distance
        bearing = self.session.bearing
        return (f"Distance: {meters / 1000:.2f} km ({round(meters)} m)",
                f"Bearing: {bearing:.0f}° ({bearing_to_compass(bearing)})")

    def route_snapshot(self) -> Optional[dict]:
        """Plain-data copy of the session for renderers"""
        if self.session is None:
            return None
        s = self.session
        distance_line, bearing_line = self.route_info()
        return {
            "start": {"name": s.start.name, **s.start.coordinate.to_dict()},
            "end": {"name": s.end.name, **s.end.coordinate.to_dict()},
            "distance": s.distance,
            "bearing": s.bearing,
            "distance_line": distance_line,
            "bearing_line": bearing_line,
            "summary": s.summary,
            "error": s.analysis.error,
            "radius": s.plan.radius,
            "samples": [dict(sample.to_dict(), message=compose_for_sample(sample.flags))
                        for sample in s.analysis.samples],
            "features": [f.to_dict() for f in s.analysis.raw_features],
        }
