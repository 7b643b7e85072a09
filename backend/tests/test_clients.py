from unittest.mock import AsyncMock
from urllib.parse import parse_qs

import httpx
import pytest

from floodrisk.clients.elevation_client import ElevationClient
from floodrisk.clients.gov_data_client import GovDataClient
from floodrisk.clients.overpass_client import OverpassClient, _classify, parse_infrastructure
from floodrisk.clients.weather_client import WeatherClient
from floodrisk.config.settings import settings
from floodrisk.models.sources import WeatherSnapshot


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestWeatherSnapshot:
    def test_from_api(self):
        snapshot = WeatherSnapshot.from_api({
            "location": {"name": "Hue"},
            "current": {
                "precip_mm": 12.5,
                "humidity": 88,
                "wind_kph": 14.4,
                "temp_c": 27,
                "condition": {"text": "Light rain"},
                "last_updated": "2024-10-01 06:00",
            },
            "forecast": {"forecastday": [
                {"date": "2024-10-01", "day": {"totalprecip_mm": 40, "daily_chance_of_rain": 89}},
            ]},
        })
        assert snapshot.location_name == "Hue"
        assert snapshot.current.precip_mm == 12.5
        assert snapshot.current.condition == "Light rain"
        assert snapshot.forecast[0].totalprecip_mm == 40
        assert snapshot.forecast[0].avghumidity == 0.0

    def test_missing_sections(self):
        snapshot = WeatherSnapshot.from_api({})
        assert snapshot.current is None
        assert snapshot.forecast == []


class TestWeatherClient:
    @pytest.mark.asyncio
    async def test_sends_key_and_query(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            seen["path"] = request.url.path
            return httpx.Response(200, json={"current": {"precip_mm": 1}})

        async with mock_client(handler) as client:
            result = await WeatherClient(client, base_url="https://weather.test/v1", api_key="k").get_current_weather("Hue")

        assert seen["path"] == "/v1/current.json"
        assert seen["key"] == "k"
        assert seen["q"] == "Hue"
        assert result.current.precip_mm == 1

    @pytest.mark.asyncio
    async def test_rate_limit_raises(self):
        async with mock_client(lambda r: httpx.Response(429)) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await WeatherClient(client, base_url="https://weather.test/v1").get_forecast("Hue")


class TestElevationClient:
    @pytest.mark.asyncio
    async def test_batches_points(self):
        def handler(request):
            assert request.url.params["locations"] == "1.0,2.0|3.0,4.0"
            return httpx.Response(200, json={"results": [{"elevation": 5}, {"elevation": 12.5}]})

        async with mock_client(handler) as client:
            points = await ElevationClient(client, url="https://elev.test/lookup").get_elevations([(1.0, 2.0), (3.0, 4.0)])

        assert [(p.latitude, p.longitude, p.elevation) for p in points] == [(1.0, 2.0, 5.0), (3.0, 4.0, 12.5)]

    @pytest.mark.asyncio
    async def test_invalid_payload(self):
        async with mock_client(lambda r: httpx.Response(200, json={"error": "x"})) as client:
            with pytest.raises(ValueError):
                await ElevationClient(client, url="https://elev.test/lookup").get_elevation(1.0, 2.0)

    @pytest.mark.asyncio
    async def test_no_points_skips_request(self):
        async with mock_client(lambda r: pytest.fail("unexpected request")) as client:
            assert await ElevationClient(client).get_elevations([]) == []


class TestOverpass:
    @pytest.mark.parametrize(
        "tags,bucket",
        [
            ({"waterway": "river"}, "rivers"),
            ({"waterway": "stream"}, "rivers"),
            ({"natural": "water"}, "water_bodies"),
            ({"landuse": "reservoir"}, "water_bodies"),
            ({"waterway": "drain"}, "drainage_channels"),
            ({"man_made": "drain"}, "drainage_channels"),
            ({"highway": "primary"}, "roads"),
            ({"highway": "footway"}, None),
            ({"building": "yes"}, "buildings"),
            ({"man_made": "dyke"}, "flood_defenses"),
            ({"barrier": "flood_barrier"}, "flood_defenses"),
            ({"amenity": "school"}, None),
        ],
    )
    def test_classify(self, tags, bucket):
        assert _classify(tags) == bucket

    def test_parse_skips_nodes_and_ways_without_geometry(self):
        geom = [{"lat": 0, "lon": 0}]
        bundle = parse_infrastructure({"elements": [
            {"type": "way", "id": 1, "tags": {"waterway": "river", "name": "Song Han"}, "geometry": geom},
            {"type": "way", "id": 2, "tags": {"building": "yes"}, "geometry": geom},
            {"type": "way", "id": 3, "tags": {"building": "yes"}},
            {"type": "node", "id": 4, "tags": {"building": "yes"}, "geometry": geom},
        ]})
        assert bundle.counts() == {
            "rivers": 1, "water_bodies": 0, "drainage": 0, "roads": 0,
            "buildings": 1, "flood_defenses": 0, "total": 2,
        }
        assert bundle.rivers[0].name == "Song Han"
        assert bundle.rivers[0].id == "way_1"

    @pytest.mark.asyncio
    async def test_posts_bbox_query(self):
        def handler(request):
            assert request.method == "POST"
            assert b"10.0%2C106.0%2C10.1%2C106.1" in request.content
            return httpx.Response(200, json={"elements": []})

        async with mock_client(handler) as client:
            bundle = await OverpassClient(client, url="https://overpass.test/api").get_infrastructure(10.0, 106.0, 10.1, 106.1)
        assert bundle.counts()["total"] == 0

    @pytest.mark.asyncio
    async def test_query_and_request_timeouts(self):
        def handler(request):
            query = parse_qs(request.content.decode())["data"][0]
            assert "[timeout:25]" in query
            assert request.extensions["timeout"]["read"] == 30.0
            return httpx.Response(200, json={"elements": []})

        async with mock_client(handler) as client:
            overpass = OverpassClient(client, url="https://overpass.test/api", query_timeout=25)
            await overpass.get_infrastructure(10.0, 106.0, 10.1, 106.1)
        assert overpass.request_timeout == 30.0

    def test_scorer_timeout_outlasts_overpass_request(self):
        overpass = OverpassClient(AsyncMock())
        assert settings.SCORER_TIMEOUT_SECONDS > overpass.request_timeout


class TestGovDataClient:
    @pytest.mark.asyncio
    async def test_disaster_history_filters_type(self):
        def handler(request):
            assert request.url.path == "/disasters"
            assert request.url.params["province"] == "Hue"
            assert "start_year" not in request.url.params
            return httpx.Response(200, json={"items": [
                {"year": 2020, "type": "flood", "economic_damage": 1e11},
                {"year": 2021, "type": "storm"},
            ]})

        async with mock_client(handler) as client:
            records = await GovDataClient(client, base_url="https://gov.test").get_disaster_history("Hue", "flood")
        assert [r.year for r in records] == [2020]

    @pytest.mark.asyncio
    async def test_not_found_means_no_data(self):
        async with mock_client(lambda r: httpx.Response(404)) as client:
            gov = GovDataClient(client, base_url="https://gov.test")
            assert await gov.get_population_density("Nowhere") is None
            assert await gov.get_hydro_stations("Nowhere") == []

    @pytest.mark.asyncio
    async def test_api_key_sent_as_bearer(self):
        def handler(request):
            assert request.headers["Authorization"] == "Bearer secret"
            return httpx.Response(200, json={"province": "Hue", "density_per_km2": 230, "urban_percentage": 49})

        async with mock_client(handler) as client:
            record = await GovDataClient(client, base_url="https://gov.test", api_key="secret").get_population_density("Hue")
        assert record.density_per_km2 == 230
