"""Standalone HTML map of an analysed route.

Usage from code:
    html = generate_html(app.route_snapshot())
"""

import html as html_lib
import json

from .classifier import primary_category
from .models import Category

# Leaflet path options per category
FEATURE_STYLES = {
    Category.WATER: {"color": "#1e90ff", "weight": 1, "fillColor": "#b6e0ff", "fillOpacity": 0.45},
    Category.RIVER: {"color": "#1e90ff", "weight": 3, "dashArray": "2 6"},
    Category.FOREST: {"color": "#047857", "weight": 1, "fillColor": "#bbf1d0", "fillOpacity": 0.45},
    Category.PARK: {"color": "#065f46", "weight": 1, "fillColor": "#bde7c9", "fillOpacity": 0.45},
    Category.HIGHWAY: {"color": "#f97316", "weight": 3},
    Category.RAILWAY: {"color": "#111827", "weight": 2, "dashArray": "4 6"},
    Category.BUILDING: {"color": "#7c3aed", "weight": 1, "fillColor": "#eadcff", "fillOpacity": 0.4},
}
DEFAULT_STYLE = {"color": "#888", "weight": 2, "opacity": 0.8}


def feature_title(tags: dict) -> str:
    category = primary_category(tags)
    if category is None:
        return "OSM feature"
    if category is Category.HIGHWAY:
        return f"Road ({tags['highway']})"
    if category is Category.RIVER:
        return "Waterway"
    return category.value.capitalize()


def popup_tags(tags: dict) -> str:
    """First six tags as popup HTML"""
    rows = [f"<em>{html_lib.escape(k)}</em>: {html_lib.escape(v)}"
            for k, v in list(tags.items())[:6]]
    return "<br>".join(rows) or "No tags"


def _is_closed(coords: list) -> bool:
    return len(coords) > 2 and coords[0] == coords[-1]


def _feature_layers(features: list[dict]) -> list[dict]:
    layers = []
    for f in features:
        tags = f.get("tags") or {}
        popup = f"<strong>{html_lib.escape(feature_title(tags))}</strong><br>{popup_tags(tags)}"
        if f.get("type") == "way" and f.get("geometry"):
            coords = [[g["lat"], g["lon"]] for g in f["geometry"]]
            style = FEATURE_STYLES.get(primary_category(tags), DEFAULT_STYLE)
            layers.append({
                "shape": "polygon" if _is_closed(coords) else "polyline",
                "coords": coords,
                "style": style,
                "popup": popup,
            })
        elif f.get("type") == "node" and primary_category(tags) is Category.PEAK:
            layers.append({"shape": "marker", "coords": [f["lat"], f["lon"]], "popup": popup})
    return layers


def generate_html(snapshot: dict) -> str:
    """Generate a Leaflet page from UselessGPS.route_snapshot() data."""
    if not snapshot:
        return "<html><body><p>No route to show.</p></body></html>"

    start = snapshot["start"]
    end = snapshot["end"]
    samples = [
        {"coords": [s["lat"], s["lon"]], "message": s["message"], "hits": len(s["hits"])}
        for s in snapshot["samples"]
    ]
    layers_json = json.dumps(_feature_layers(snapshot["features"]))
    samples_json = json.dumps(samples)
    summary = html_lib.escape(snapshot["summary"])
    distance_line = html_lib.escape(snapshot["distance_line"])
    bearing_line = html_lib.escape(snapshot["bearing_line"])
    start_name = json.dumps(f"Start: {start['name']}")
    end_name = json.dumps(f"Dest: {end['name']}")

    return f'''<!DOCTYPE html>
<html>
<head>
    <title>Useless GPS</title>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <link rel="stylesheet" href="https://unpkg.com/leaflet@1.9.4/dist/leaflet.css" />
    <script src="https://unpkg.com/leaflet@1.9.4/dist/leaflet.js"></script>
    <style>
        body {{ margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif; }}
        #map {{ position: absolute; top: 0; bottom: 0; left: 0; right: 320px; }}
        #sidebar {{ position: absolute; top: 0; bottom: 0; right: 0; width: 320px; background: #1a1a2e; color: #eee; overflow-y: auto; padding: 15px; box-sizing: border-box; }}
        h2 {{ margin-top: 0; color: #fff; }}
        .stat {{ margin: 8px 0; padding: 10px; background: #16213e; border-radius: 5px; }}
        .stat-value {{ font-size: 15px; color: #fff; }}
        .speech {{ margin-top: 16px; padding: 12px; background: #fef3c7; color: #78350f; border-radius: 8px; font-weight: 500; }}
        .sample-item {{ font-size: 12px; padding: 6px 8px; margin: 4px 0; background: #0f3460; border-radius: 4px; }}
    </style>
</head>
<body>
    <div id="map"></div>
    <div id="sidebar">
        <h2>Useless GPS</h2>
        <div class="stat"><div class="stat-value">{distance_line}</div></div>
        <div class="stat"><div class="stat-value">{bearing_line}</div></div>
        <div class="speech">{summary}</div>
        <div id="samples"></div>
    </div>
    <script>
        var layers = {layers_json};
        var samples = {samples_json};
        var start = [{start["lat"]}, {start["lon"]}];
        var dest = [{end["lat"]}, {end["lon"]}];

        var map = L.map('map');
        L.tileLayer('https://{{s}}.tile.openstreetmap.org/{{z}}/{{x}}/{{y}}.png', {{
            attribution: '&copy; OpenStreetMap contributors'
        }}).addTo(map);

        L.marker(start).addTo(map).bindPopup({start_name});
        L.marker(dest).addTo(map).bindPopup({end_name});
        var line = L.polyline([start, dest], {{ color: 'crimson', weight: 4, dashArray: '6 8' }}).addTo(map);
        map.fitBounds(line.getBounds().pad(0.3));

        layers.forEach(function(l) {{
            var layer;
            if (l.shape === 'polygon') layer = L.polygon(l.coords, l.style);
            else if (l.shape === 'polyline') layer = L.polyline(l.coords, l.style);
            else layer = L.marker(l.coords);
            layer.addTo(map).bindPopup(l.popup);
        }});

        var list = document.getElementById('samples');
        samples.forEach(function(s, idx) {{
            L.circleMarker(s.coords, {{ radius: 6, color: '#0ea5a4', fillColor: '#34d399', fillOpacity: 0.9 }})
                .addTo(map).bindPopup(s.message);
            var div = document.createElement('div');
            div.className = 'sample-item';
            div.textContent = '#' + (idx + 1) + ' ' + s.message + ' (' + s.hits + ' hits)';
            list.appendChild(div);
        }});
    </script>
</body>
</html>'''


def write_html(snapshot: dict, path: str):
    with open(path, "w") as f:
        f.write(generate_html(snapshot))
