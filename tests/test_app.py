import random

import pytest
import requests

from conftest import FakeClock, FakeFetcher, FakeGeocoder, RecordingAudio, water_at
from useless_gps import messages
from useless_gps.app import UselessGPS
from useless_gps.config import CONFIG
from useless_gps.errors import (
    GeocodeNotFound,
    InsufficientInput,
    NoRouteDrawn,
    NoSamplesAvailable,
)
from useless_gps.models import Category, Coordinate
from useless_gps.playback import EventKind, PlaybackStatus
from useless_gps.sampler import compute_sample_plan


def make_app(places, fetcher, config, quiet_logger, **kwargs):
    kwargs.setdefault("clock", FakeClock())
    return UselessGPS(
        geocoder=FakeGeocoder(places),
        fetcher=fetcher,
        config=config,
        logger=quiet_logger,
        audio=kwargs.pop("audio", RecordingAudio()),
        rng=kwargs.pop("rng", random.Random(0)),
        **kwargs,
    )


def midpoint_water():
    plan = compute_sample_plan(Coordinate(0, 0), Coordinate(0, 1))
    return [water_at(plan.points[6])]


def test_water_route_end_to_end(equator_places, config, quiet_logger):
    clock = FakeClock()
    audio = RecordingAudio()
    app = make_app(equator_places, FakeFetcher(midpoint_water()), config, quiet_logger,
                   audio=audio, clock=clock, sleep=clock.sleep)

    session = app.go("Origin", "East")

    assert session.analysis.error is False
    assert session.analysis.global_flags[Category.WATER] is True
    assert session.analysis.global_flags[Category.RIVER] is False
    assert session.summary == messages.SUMMARY_WATERY
    assert audio.spoken == [messages.SUMMARY_WATERY]
    assert app.route_info() == ("Distance: 111.19 km (111195 m)", "Bearing: 90° (east)")

    app.simulate()

    assert app.playback.status is PlaybackStatus.COMPLETED
    assert audio.spoken.count("You go swim!") == 1
    assert audio.spoken[-1] in messages.ENDINGS


def test_fetcher_receives_sample_points_and_radius(equator_places, config, quiet_logger):
    fetcher = FakeFetcher([])
    app = make_app(equator_places, fetcher, config, quiet_logger)

    session = app.go("Origin", "East")

    points, radius = fetcher.calls[0]
    assert points == session.plan.points
    assert radius == 900
    assert len(session.analysis.samples) == 12
    assert session.analysis.radius == 900


def test_short_hop_without_features(equator_places, config, quiet_logger):
    app = make_app(equator_places, FakeFetcher([]), config, quiet_logger)

    session = app.go("Origin", "Nearby")

    assert session.distance == pytest.approx(50, abs=0.1)
    assert not any(session.analysis.global_flags.values())
    assert session.summary == messages.SUMMARY_SHORT


def test_fetch_failure_yields_error_analysis(equator_places, config, quiet_logger, fetch_failure):
    app = make_app(equator_places, FakeFetcher(fetch_failure), config, quiet_logger)

    session = app.go("Origin", "East")

    assert session.analysis.error is True
    assert session.analysis.samples == ()
    assert session.analysis.raw_features == ()
    assert session.analysis.global_flags == {}
    assert session.summary == messages.SUMMARY_ERROR
    with pytest.raises(NoSamplesAvailable):
        app.simulate()
    assert app.playback.status is PlaybackStatus.IDLE


def test_transport_errors_are_treated_as_fetch_failures(equator_places, config, quiet_logger):
    fetcher = FakeFetcher(requests.ConnectionError("no route to host"))
    app = make_app(equator_places, fetcher, config, quiet_logger)

    assert app.go("Origin", "East").analysis.error is True


def test_failed_fetch_is_retried(equator_places, quiet_logger, fetch_failure):
    sleeps = []
    fetcher = FakeFetcher(fetch_failure, midpoint_water())
    app = make_app(equator_places, fetcher, dict(CONFIG, fetch_retry_max_time=30),
                   quiet_logger, sleep=sleeps.append)

    session = app.go("Origin", "East")

    assert len(fetcher.calls) == 2
    assert sleeps == [1.0]
    assert session.analysis.error is False


@pytest.mark.parametrize("start, dest", [("", "East"), ("Origin", "   "), (None, None)])
def test_missing_input_is_rejected_before_geocoding(equator_places, config, quiet_logger, start, dest):
    app = make_app(equator_places, FakeFetcher([]), config, quiet_logger)

    with pytest.raises(InsufficientInput):
        app.go(start, dest)
    assert app.geocoder.queries == []


def test_unknown_places_are_reported(equator_places, config, quiet_logger):
    fetcher = FakeFetcher([])
    app = make_app(equator_places, fetcher, config, quiet_logger)

    with pytest.raises(GeocodeNotFound) as excinfo:
        app.go("Atlantis", "East")

    assert excinfo.value.names == ["Atlantis"]
    assert app.session is None
    assert fetcher.calls == []


def test_geocoder_network_errors_count_as_not_found(config, quiet_logger):
    class BrokenGeocoder:
        def geocode(self, query):
            raise requests.Timeout("nominatim timed out")

    app = UselessGPS(geocoder=BrokenGeocoder(), fetcher=FakeFetcher([]), config=config,
                     logger=quiet_logger, audio=RecordingAudio())

    with pytest.raises(GeocodeNotFound) as excinfo:
        app.go("Origin", "East")
    assert excinfo.value.names == ["Origin", "East"]


def test_simulate_without_route(equator_places, config, quiet_logger):
    app = make_app(equator_places, FakeFetcher([]), config, quiet_logger)

    with pytest.raises(NoRouteDrawn):
        app.simulate()


def test_new_route_cancels_running_playback(equator_places, config, quiet_logger):
    app = make_app(equator_places, FakeFetcher(midpoint_water()), config, quiet_logger)
    app.go("Origin", "East")
    run_id = app.simulate(run=False)
    app.playback.tick(run_id)

    app.go("Origin", "Nearby")

    assert app.playback.status is PlaybackStatus.CANCELLED
    assert app.playback.tick(run_id) == []
    assert app.session.end.name == "Fifty Meters East"


def test_reset_discards_session(equator_places, config, quiet_logger):
    app = make_app(equator_places, FakeFetcher([]), config, quiet_logger)
    app.go("Origin", "East")
    app.simulate(run=False)

    app.reset()

    assert app.session is None
    assert app.playback.status is PlaybackStatus.CANCELLED
    assert app.route_info() == ("Distance: -", "Bearing: -")
    assert app.route_snapshot() is None
    with pytest.raises(NoRouteDrawn):
        app.simulate()


def test_go_coordinates(config, quiet_logger):
    app = UselessGPS(geocoder=FakeGeocoder({}), fetcher=FakeFetcher([]), config=config,
                     logger=quiet_logger, audio=RecordingAudio())

    session = app.go_coordinates(Coordinate(0, 0), Coordinate(0, 0.00045))

    assert session.start.name == "Start"
    assert session.summary == messages.SUMMARY_SHORT
    with pytest.raises(InsufficientInput):
        app.go_coordinates(None, Coordinate(0, 0))


def test_snark_keeps_the_base_message(equator_places, config, quiet_logger):
    audio = RecordingAudio()
    app = make_app(equator_places, FakeFetcher(midpoint_water()), config, quiet_logger,
                   audio=audio, snark=True)

    app.go("Origin", "East")

    assert audio.spoken[0].startswith(messages.SUMMARY_WATERY + " ")
    assert audio.spoken[0] != messages.SUMMARY_WATERY


def test_snapshot_is_a_detached_copy(equator_places, config, quiet_logger):
    app = make_app(equator_places, FakeFetcher(midpoint_water()), config, quiet_logger)
    app.go("Origin", "East")

    snapshot = app.route_snapshot()

    assert snapshot["summary"] == messages.SUMMARY_WATERY
    assert snapshot["start"] == {"name": "Null Island", "lat": 0.0, "lon": 0.0}
    assert len(snapshot["samples"]) == 12
    assert snapshot["samples"][6]["message"] == "You go swim!"
    assert snapshot["samples"][6]["flags"]["water"] is True
    assert snapshot["features"][0]["tags"] == {"natural": "water"}

    snapshot["samples"][6]["flags"]["water"] = False
    snapshot["features"][0]["tags"]["natural"] = "wood"
    assert app.session.analysis.samples[6].flags[Category.WATER] is True
    assert app.session.analysis.raw_features[0].tags["natural"] == "water"


def test_playback_events_reach_audio(equator_places, config, quiet_logger):
    audio = RecordingAudio()
    clock = FakeClock()
    app = make_app(equator_places, FakeFetcher(midpoint_water()), config, quiet_logger,
                   audio=audio, clock=clock)
    app.go("Origin", "East")
    run_id = app.simulate(run=False)

    events = []
    while app.playback.running:
        events.extend(app.playback.tick(run_id))
        clock.advance(app.playback.tick_interval_ms)

    assert [e.message for e in events] == audio.spoken[1:]
    assert events[-1].kind is EventKind.COMPLETED


def test_any_fetcher_exception_yields_error_analysis(equator_places, config, quiet_logger):
    app = make_app(equator_places, FakeFetcher(TimeoutError("read timed out")), config, quiet_logger)

    session = app.go("Origin", "East")

    assert session.analysis.error is True
    assert session.analysis.samples == ()
    assert session.summary == messages.SUMMARY_ERROR
    with pytest.raises(NoSamplesAvailable):
        app.simulate()


@pytest.mark.parametrize("error", [KeyError("lat"), ValueError("latitude out of range: 91")])
def test_bad_geocoder_results_count_as_not_found(config, quiet_logger, error):
    class BadGeocoder:
        def geocode(self, query):
            raise error

    app = UselessGPS(geocoder=BadGeocoder(), fetcher=FakeFetcher([]), config=config,
                     logger=quiet_logger, audio=RecordingAudio())

    with pytest.raises(GeocodeNotFound) as excinfo:
        app.go("Origin", "East")
    assert excinfo.value.names == ["Origin", "East"]


def test_returned_session_is_detached(equator_places, config, quiet_logger):
    app = make_app(equator_places, FakeFetcher(midpoint_water()), config, quiet_logger)

    session = app.go("Origin", "East")
    session.analysis.samples[6].flags[Category.WATER] = False
    session.analysis.samples[6].hits.clear()

    assert app.session.analysis.samples[6].flags[Category.WATER] is True
    assert app.session.analysis.samples[6].hits
