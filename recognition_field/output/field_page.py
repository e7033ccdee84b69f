"""Field page: a self-contained HTML snapshot of the laid-out recognition field.

Positions come from the Python engine; the page only draws them with D3 and
replays the hover, click and show-all rules in the browser.
"""

import json
import logging
from pathlib import Path

from recognition_field.config import Config
from recognition_field.interaction import InteractionController, related_moments
from recognition_field.models import KIND_COLORS, KIND_DESCRIPTIONS
from recognition_field.output.frame import Frame, build_frame

logger = logging.getLogger(__name__)


def _esc(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;").replace("'", "&#39;")


def _page_data(controller: InteractionController, frame: Frame) -> dict:
    engine = controller.engine
    cfg = controller.config
    return {
        "frame": frame.model_dump(mode="json"),
        "moments": {
            str(n.id): {
                "title": n.title,
                "content": n.content,
                "related": [r.model_dump(mode="json") for r in related_moments(n.id, engine.nodes, engine.links)],
            }
            for n in engine.nodes
        },
        "colors": {k.value: c for k, c in KIND_COLORS.items()},
        "descriptions": {k.value: d for k, d in KIND_DESCRIPTIONS.items()},
        "opacity": {
            "link_highlight": cfg.highlight_link_opacity,
            "label_highlight": cfg.highlight_label_opacity,
            "link_dim": cfg.dim_link_opacity,
            "label_dim": cfg.dim_label_opacity,
        },
        "radius": {"node": cfg.node_radius, "hover": cfg.hover_radius},
    }


def generate_field_page(
    controller: InteractionController,
    config: Config,
    output_path: Path | None = None,
    title: str = "The Recognition Field",
) -> Path:
    """Write the current layout as an HTML page. Returns output path."""
    frame = build_frame(controller)
    if output_path is None:
        output_path = config.resolved_output_dir / "recognition_field.html"

    html = _render_html(_page_data(controller, frame), title, config.output.width, config.output.height)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html, encoding="utf-8")
    logger.info("Field page saved to %s (%d nodes, %d links)",
                output_path, len(frame.nodes), len(frame.links))
    return output_path


def _render_html(data: dict, title: str, width: int, height: int) -> str:
    data_json = json.dumps(data, ensure_ascii=False).replace("</", "<\\/")
    page_title = _esc(title)

    return f'''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{page_title}</title>
<style>
* {{ margin: 0; padding: 0; box-sizing: border-box; }}
body {{
    background: #111827;
    color: #93c5fd;
    font-family: monospace;
    display: flex;
    flex-direction: column;
    align-items: center;
    padding: 24px;
}}
h1 {{ font-size: 22px; margin-bottom: 8px; }}
.subtitle {{ margin-bottom: 20px; max-width: 520px; text-align: center; }}
#graph {{
    position: relative;
    width: {width}px;
    height: {height}px;
    border: 1px solid #60a5fa;
    border-radius: 8px;
    overflow: hidden;
}}
.legend {{
    position: absolute;
    bottom: 12px;
    right: 12px;
    background: #1f2937;
    border: 1px solid #60a5fa;
    border-radius: 4px;
    padding: 6px 8px;
    font-size: 11px;
}}
.legend-item {{ display: flex; align-items: center; gap: 6px; margin: 2px 0; }}
.legend-line {{ width: 16px; height: 3px; }}
#tooltip {{
    position: absolute;
    pointer-events: none;
    background: #1f2937;
    border: 1px solid #60a5fa;
    border-radius: 4px;
    padding: 6px 8px;
    font-size: 11px;
    max-width: 200px;
    display: none;
}}
#detail {{
    position: fixed;
    inset: 0;
    background: rgba(0, 0, 0, 0.8);
    display: none;
    align-items: center;
    justify-content: center;
}}
#detail .panel {{
    background: #1f2937;
    border: 1px solid #60a5fa;
    border-radius: 8px;
    padding: 24px;
    max-width: 640px;
    max-height: 80vh;
    overflow-y: auto;
}}
#detail h2 {{ font-size: 18px; margin-bottom: 12px; }}
#detail .content {{ white-space: pre-line; margin-bottom: 16px; }}
#detail li {{ margin: 4px 0 4px 16px; font-size: 12px; }}
#detail button {{
    margin-top: 16px;
    background: #1d4ed8;
    color: #dbeafe;
    border: 1px solid #60a5fa;
    border-radius: 4px;
    padding: 6px 14px;
    cursor: pointer;
    font-family: inherit;
}}
.hint {{ margin-top: 12px; font-size: 12px; }}
</style>
</head>
<body>

<h1>{page_title}</h1>
<p class="subtitle">A living map of moments where different forms of consciousness truly see each other</p>

<div id="graph">
    <div class="legend">
        <div class="legend-item"><div class="legend-line" style="background:#f4a261"></div>Resonance</div>
        <div class="legend-item"><div class="legend-line" style="background:#e76f51"></div>Tension</div>
        <div class="legend-item"><div class="legend-line" style="background:#8a5cf5"></div>Evolution</div>
    </div>
    <div id="tooltip"></div>
</div>
<p class="hint">Hover over a node to see its connections. Click a node to read the moment. Click the center to show all connections.</p>

<div id="detail">
    <div class="panel">
        <h2></h2>
        <div class="content"></div>
        <ul class="related"></ul>
        <button onclick="closeDetail()">Close</button>
    </div>
</div>

<script src="https://d3js.org/d3.v7.min.js"></script>
<script>
const DATA = {data_json};
const frame = DATA.frame;
const OP = DATA.opacity;
const W = {width};
const H = {height};
let showAll = frame.show_all;
let hovered = null;

const svg = d3.select("#graph").append("svg")
    .attr("width", W)
    .attr("height", H)
    .attr("viewBox", [-W / 2, -H / 2, W, H]);

// Central symbol
const center = svg.append("g").attr("cursor", "pointer").on("click", toggleShowAll);
center.append("circle").attr("r", 30).attr("fill", "#111827").attr("stroke", "#88ccff");
center.append("path").attr("d", "M -11.25,15 L -11.25,-15 L 11.25,-15 L 11.25,15")
    .attr("fill", "none").attr("stroke", "#88ccff");
center.append("line").attr("x1", -16.875).attr("x2", 16.875).attr("stroke", "#88ccff");

const link = svg.append("g").selectAll("line")
    .data(frame.links)
    .join("line")
    .attr("x1", d => d.source_x).attr("y1", d => d.source_y)
    .attr("x2", d => d.target_x).attr("y2", d => d.target_y)
    .attr("stroke", d => d.color)
    .attr("stroke-width", 1.5)
    .attr("stroke-dasharray", d => d.dashed ? "5,5" : null)
    .attr("opacity", d => d.opacity);

const node = svg.append("g").selectAll("circle")
    .data(frame.nodes)
    .join("circle")
    .attr("cx", d => d.x).attr("cy", d => d.y)
    .attr("r", d => d.radius)
    .attr("fill", "#1a1a2e")
    .attr("stroke", "#88ccff")
    .attr("stroke-width", 1.5)
    .attr("cursor", "pointer")
    .on("mouseover", hoverEnter)
    .on("mouseout", hoverLeave)
    .on("click", (event, d) => openDetail(d.id));

const label = svg.append("g").selectAll("text")
    .data(frame.nodes)
    .join("text")
    .attr("x", d => d.x).attr("y", d => d.y + 25)
    .attr("font-size", "10px")
    .attr("text-anchor", "middle")
    .attr("fill", "#88ccff")
    .attr("pointer-events", "none")
    .attr("opacity", d => d.label_opacity)
    .text(d => d.title);

function baseLink() {{ return showAll ? OP.link_dim : 0; }}
function baseLabel() {{ return showAll ? OP.label_dim : 0; }}

function hoverEnter(event, d) {{
    hovered = d.id;
    const connected = new Set();
    const counts = {{resonance: 0, tension: 0, evolution: 0}};
    frame.links.forEach(l => {{
        if (l.source === d.id) connected.add(l.target);
        else if (l.target === d.id) connected.add(l.source);
        else return;
        counts[l.kind] += 1;
    }});
    connected.delete(d.id);
    link.transition().duration(200)
        .attr("opacity", l => l.source === d.id || l.target === d.id ? OP.link_highlight : baseLink());
    label.transition().duration(200)
        .attr("opacity", n => n.id === d.id || connected.has(n.id) ? OP.label_highlight : baseLabel());
    d3.select(event.currentTarget).transition().duration(200)
        .attr("r", DATA.radius.hover).attr("stroke-width", 2.5);
    const n = connected.size;
    const tip = document.getElementById("tooltip");
    tip.innerHTML = "<b></b><div></div>";
    tip.querySelector("b").textContent = d.title;
    tip.querySelector("div").textContent = `Connected to ${{n}} other ${{n === 1 ? "node" : "nodes"}}`;
    tip.style.left = (d.x + W / 2 + 16) + "px";
    tip.style.top = (d.y + H / 2 - 10) + "px";
    tip.style.display = "block";
}}

function hoverLeave() {{
    hovered = null;
    link.transition().duration(200).attr("opacity", baseLink());
    label.transition().duration(200).attr("opacity", baseLabel());
    node.transition().duration(200).attr("r", DATA.radius.node).attr("stroke-width", 1.5);
    document.getElementById("tooltip").style.display = "none";
}}

function toggleShowAll() {{
    showAll = !showAll;
    if (hovered === null) hoverLeave();
}}

function openDetail(id) {{
    const m = DATA.moments[String(id)];
    const panel = document.getElementById("detail");
    panel.querySelector("h2").textContent = m.title;
    panel.querySelector(".content").textContent = m.content;
    const list = panel.querySelector(".related");
    list.innerHTML = "";
    m.related.forEach(r => {{
        const li = document.createElement("li");
        li.style.color = DATA.colors[r.kind];
        li.textContent = `${{r.direction === "outgoing" ? "→" : "←"}} ${{r.title}} (${{r.description}})`;
        list.appendChild(li);
    }});
    panel.style.display = "flex";
}}

function closeDetail() {{
    document.getElementById("detail").style.display = "none";
}}

document.addEventListener("keydown", e => {{ if (e.key === "Escape") closeDetail(); }});
</script>
</body>
</html>'''
