"""Web dashboard and read-only API for the arbitrage scanner"""
import asyncio
import logging
from typing import Optional

from fastapi import Depends, FastAPI, WebSocket, WebSocketDisconnect, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from engine import ArbitrageEngine
from engine_metrics import MetricsEngine
from src.auth.dependencies import SESSION_COOKIE, has_valid_session, require_session
from src.auth.routes import router as auth_router
from src.auth.service import access_key_service
from src.core import ArbitrageOpportunity, PublishedState, SharedStateStore

logger = logging.getLogger(__name__)

app = FastAPI(title="RouteScout", version="1.0.0")
app.include_router(auth_router)


class DashboardManager:
    """Manages WebSocket connections to dashboard clients"""

    def __init__(self):
        self.active_connections: list[WebSocket] = []
        self.engine: Optional[ArbitrageEngine] = None
        self.store = SharedStateStore()
        self.metrics: Optional[MetricsEngine] = None

    def set_engine(self, engine: ArbitrageEngine):
        """Read from the engine's store and push each published cycle"""
        self.engine = engine
        self.store = engine.store
        self.metrics = engine.metrics
        engine.on_cycle(self._on_cycle)
        engine.on_opportunity(self._on_opportunity)
        if engine.notifier:
            engine.notifier.set_websocket_broadcast(self.broadcast)

    def get_state(self) -> dict:
        if self.engine:
            return self.engine.get_state()
        return self.store.current().to_dict()

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"Dashboard client connected. Total: {len(self.active_connections)}")

        await websocket.send_json({
            "type": "state",
            "data": self.get_state()
        })

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
        logger.info(f"Dashboard client disconnected. Total: {len(self.active_connections)}")

    async def broadcast(self, message: dict):
        """Broadcast message to all connected clients"""
        for connection in list(self.active_connections):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.error(f"Broadcast error: {e}")
                self.disconnect(connection)

    def _on_cycle(self, state: PublishedState):
        """Handle a newly published cycle"""
        if not self.active_connections:
            return
        asyncio.create_task(self.broadcast({
            "type": "state",
            "data": state.to_dict()
        }))

    def _on_opportunity(self, opportunity: ArbitrageOpportunity):
        """Push a single opportunity as soon as its cycle is published"""
        if not self.active_connections:
            return
        asyncio.create_task(self.broadcast({
            "type": "opportunity",
            "data": opportunity.to_dict()
        }))


manager = DashboardManager()


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    if not access_key_service.is_valid(websocket.cookies.get(SESSION_COOKIE)):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await manager.connect(websocket)
    try:
        while True:
            # Keep connection alive, handle any client messages
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        manager.disconnect(websocket)


@app.get("/api/prices", dependencies=[Depends(require_session)])
async def get_prices():
    """Last published prices: token -> exchange -> price"""
    return manager.store.get_prices()


@app.get("/api/arbs", dependencies=[Depends(require_session)])
async def get_arbs():
    """Opportunities of the last published cycle, most profitable first"""
    return manager.store.get_opportunities()


@app.get("/api/stats", dependencies=[Depends(require_session)])
async def get_stats():
    """Session statistics"""
    return manager.store.get_stats()


@app.get("/api/state", dependencies=[Depends(require_session)])
async def get_state():
    """Prices, opportunities and stats of the same cycle"""
    return manager.get_state()


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    if not manager.metrics:
        return Response(content="Metrics not initialized", media_type="text/plain", status_code=503)
    return Response(
        content=manager.metrics.get_prometheus_metrics(),
        media_type=manager.metrics.get_prometheus_content_type()
    )


@app.get("/", response_class=HTMLResponse)
async def dashboard(valid: bool = Depends(has_valid_session)):
    if not valid:
        return RedirectResponse(url="/login", status_code=status.HTTP_302_FOUND)
    return HTMLResponse(DASHBOARD_HTML)


DASHBOARD_HTML = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>RouteScout</title>
    <style>
        body { font-family: Arial, sans-serif; background: #0f1117; color: #e8eaed; margin: 24px; }
        h1 { margin: 0 0 8px 0; }
        a { color: #9aa0a6; }
        .stats { display: flex; gap: 16px; margin: 16px 0; }
        .card { background: #1a1d26; padding: 12px 16px; border-radius: 8px; min-width: 160px; }
        .card .value { font-size: 22px; font-weight: bold; }
        table { border-collapse: collapse; width: 100%; margin-bottom: 24px; background: #1a1d26; }
        th, td { padding: 6px 10px; border-bottom: 1px solid #2a2d3a; text-align: right; }
        th:first-child, td:first-child { text-align: left; }
        .profit { color: #2ecc71; }
        .muted { color: #9aa0a6; }
    </style>
</head>
<body>
    <h1>RouteScout</h1>
    <div class="muted">Cycle <span id="cycle">-</span> &middot; <span id="published">-</span>
        &middot; <a href="/logout">Logout</a></div>

    <div class="stats">
        <div class="card"><div class="muted">Routes checked</div><div class="value" id="routes">0</div></div>
        <div class="card"><div class="muted">Opportunities</div><div class="value" id="found">0</div></div>
        <div class="card"><div class="muted">Potential profit</div><div class="value" id="total">0</div></div>
        <div class="card"><div class="muted">Best</div><div class="value" id="best">0</div></div>
    </div>

    <h2>Opportunities</h2>
    <table>
        <thead><tr><th>Token</th><th>From</th><th>To</th><th>Route</th><th>Volume</th><th>Profit, USD</th></tr></thead>
        <tbody id="arbs"></tbody>
    </table>

    <h2>Prices</h2>
    <table>
        <thead id="prices-head"></thead>
        <tbody id="prices"></tbody>
    </table>

    <script>
        const EXCHANGES = ["binance", "kucoin", "bybit", "okx", "huobi"];

        function render(state) {
            document.getElementById("cycle").textContent = state.cycle;
            document.getElementById("published").textContent = state.published_at || "-";
            document.getElementById("routes").textContent = state.stats.routes_checked;
            document.getElementById("found").textContent = state.stats.opportunities_found;
            document.getElementById("total").textContent = state.stats.total_profit.toFixed(2);
            document.getElementById("best").textContent = state.stats.max_profit.toFixed(2);

            document.getElementById("arbs").innerHTML = state.opportunities.map(o =>
                `<tr><td>${o.token}</td><td>${o.source_exchange}</td><td>${o.dest_exchange}</td>` +
                `<td>${o.route_token}</td><td>${o.volume.toFixed(4)}</td>` +
                `<td class="profit">${o.profit.toFixed(2)}</td></tr>`
            ).join("") || `<tr><td colspan="6" class="muted">No opportunities</td></tr>`;

            document.getElementById("prices-head").innerHTML =
                "<tr><th>Token</th>" + EXCHANGES.map(e => `<th>${e}</th>`).join("") + "</tr>";
            document.getElementById("prices").innerHTML = Object.entries(state.prices).map(([token, byEx]) =>
                `<tr><td>${token}</td>` + EXCHANGES.map(e =>
                    `<td>${e in byEx ? byEx[e].toFixed(6) : '<span class="muted">-</span>'}</td>`
                ).join("") + "</tr>"
            ).join("");
        }

        function connect() {
            const proto = location.protocol === "https:" ? "wss" : "ws";
            const ws = new WebSocket(`${proto}://${location.host}/ws`);
            ws.onmessage = (event) => {
                const msg = JSON.parse(event.data);
                if (msg.type === "state") render(msg.data);
            };
            ws.onclose = () => setTimeout(connect, 3000);
        }

        fetch("/api/state").then(r => r.ok ? r.json() : null).then(s => s && render(s));
        connect();
    </script>
</body>
</html>
"""
