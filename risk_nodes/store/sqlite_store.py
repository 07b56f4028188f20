"""
SQLite-backed risk node store.

Nodes live in a single table keyed by CNN with latitude/longitude indexes.
Proximity and polygon queries use the indexes as a bounding-box prefilter and
then apply the exact haversine / shapely test in Python. Blocking SQLite calls
run in worker threads so the event loop is never held up.
"""

import asyncio
import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from shapely.geometry import Point

from .base_store import BaseRiskNodeStore
from ..data.distance_utils import bounding_box, haversine_distances
from ..data.geometry import polygon_to_shape
from ..data.models import GeoPoint, RiskNode
from ..exceptions import StoreError

logger = logging.getLogger(__name__)

# Stay well below SQLite's host parameter limit
IN_CLAUSE_CHUNK = 500

SELECT_COLUMNS = 'cnn, risk, lon, lat, edges, batch_id'


class SQLiteRiskNodeStore(BaseRiskNodeStore):
    """
    Risk node store persisted in a SQLite database file.
    """
    
    name = "sqlite"
    
    def __init__(self, db_path: str = "risk_nodes.db"):
        """
        Initialize the store and create its schema if needed.
        
        Args:
            db_path: Path to the SQLite database file
        """
        if db_path == ":memory:":
            raise ValueError("SQLiteRiskNodeStore needs a database file; use InMemoryRiskNodeStore instead")
        
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        
        try:
            self._init_database()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to initialize risk node database at {db_path}: {e}") from e
        
        logger.info(f"SQLiteRiskNodeStore initialized at {self.db_path}")
    
    def _init_database(self):
        """Initialize the SQLite schema for risk nodes."""
        with self._get_db_connection() as conn:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS risk_nodes (
                    cnn TEXT PRIMARY KEY,
                    risk REAL NOT NULL,
                    lon REAL NOT NULL,
                    lat REAL NOT NULL,
                    edges TEXT NOT NULL,
                    batch_id TEXT,
                    created_at TEXT NOT NULL
                )
            ''')
            conn.execute('CREATE INDEX IF NOT EXISTS idx_risk_nodes_lat ON risk_nodes(lat)')
            conn.execute('CREATE INDEX IF NOT EXISTS idx_risk_nodes_lon ON risk_nodes(lon)')
            conn.execute('CREATE INDEX IF NOT EXISTS idx_risk_nodes_batch ON risk_nodes(batch_id)')
            conn.commit()
    
    @contextmanager
    def _get_db_connection(self):
        """Get a database connection with proper cleanup."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()
    
    async def _run(self, func, *args):
        """Run a blocking query in a worker thread, converting SQLite failures."""
        try:
            return await asyncio.to_thread(func, *args)
        except sqlite3.IntegrityError as e:
            raise StoreError(f"Risk node constraint violated: {e}") from e
        except sqlite3.Error as e:
            raise StoreError(f"Risk node query failed: {e}") from e
    
    @staticmethod
    def _row_to_node(row: sqlite3.Row) -> RiskNode:
        return RiskNode(
            cnn=row['cnn'],
            risk=row['risk'],
            location=GeoPoint.from_lon_lat(row['lon'], row['lat']),
            edges=[{'cnn': cnn} for cnn in json.loads(row['edges'])],
            batch_id=row['batch_id']
        )
    
    # Blocking implementations
    
    def _insert_many_sync(self, nodes: List[RiskNode]) -> None:
        now = datetime.now().isoformat()
        rows = [
            (node.cnn, node.risk, node.location.longitude, node.location.latitude,
             json.dumps(node.neighbor_cnns), node.batch_id, now)
            for node in nodes
        ]
        with self._get_db_connection() as conn:
            # One transaction: a duplicate anywhere rolls back the whole batch
            with conn:
                conn.executemany('''
                    INSERT INTO risk_nodes (cnn, risk, lon, lat, edges, batch_id, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                ''', rows)
    
    def _find_one_sync(self, cnn: str) -> Optional[RiskNode]:
        with self._get_db_connection() as conn:
            row = conn.execute(
                f'SELECT {SELECT_COLUMNS} FROM risk_nodes WHERE cnn = ?', (cnn,)
            ).fetchone()
        return self._row_to_node(row) if row else None
    
    def _find_many_sync(self, cnns: List[str]) -> List[RiskNode]:
        nodes = []
        with self._get_db_connection() as conn:
            for start in range(0, len(cnns), IN_CLAUSE_CHUNK):
                chunk = cnns[start:start + IN_CLAUSE_CHUNK]
                placeholders = ', '.join('?' for _ in chunk)
                rows = conn.execute(
                    f'SELECT {SELECT_COLUMNS} FROM risk_nodes WHERE cnn IN ({placeholders}) '
                    f'ORDER BY rowid',
                    chunk
                ).fetchall()
                nodes.extend(self._row_to_node(row) for row in rows)
        return nodes
    
    def _find_in_bounds_sync(self, bounds: Dict[str, float]) -> List[RiskNode]:
        with self._get_db_connection() as conn:
            rows = conn.execute(f'''
                SELECT {SELECT_COLUMNS} FROM risk_nodes
                WHERE lat BETWEEN ? AND ? AND lon BETWEEN ? AND ?
                ORDER BY rowid
            ''', (bounds['lat_min'], bounds['lat_max'],
                  bounds['lon_min'], bounds['lon_max'])).fetchall()
        return [self._row_to_node(row) for row in rows]
    
    def _count_sync(self) -> int:
        with self._get_db_connection() as conn:
            return conn.execute('SELECT COUNT(*) FROM risk_nodes').fetchone()[0]
    
    # Store interface
    
    async def insert_many(self, nodes: Sequence[RiskNode]) -> List[RiskNode]:
        nodes = list(nodes)
        if not nodes:
            return []
        await self._run(self._insert_many_sync, nodes)
        logger.info(f"Inserted {len(nodes)} risk nodes into {self.db_path}")
        return nodes
    
    async def find_one(self, cnn: str) -> Optional[RiskNode]:
        return await self._run(self._find_one_sync, cnn)
    
    async def find_many(self, cnns: Sequence[str]) -> List[RiskNode]:
        cnns = list(dict.fromkeys(cnns))
        if not cnns:
            return []
        return await self._run(self._find_many_sync, cnns)
    
    async def find_near(self, point: GeoPoint, max_distance: float,
                        min_distance: float = 0.0) -> List[RiskNode]:
        if max_distance < 0 or min_distance < 0:
            raise StoreError("Distances must be non-negative")
        
        bounds = bounding_box(point.latitude, point.longitude, max_distance)
        # Boxes that would cross the antimeridian are clamped; scan every longitude instead
        if bounds['lon_min'] <= -180.0 or bounds['lon_max'] >= 180.0:
            bounds['lon_min'], bounds['lon_max'] = -180.0, 180.0

        candidates = await self._run(self._find_in_bounds_sync, bounds)
        if not candidates:
            return []
        
        distances = haversine_distances(
            point.latitude, point.longitude,
            [node.location.latitude for node in candidates],
            [node.location.longitude for node in candidates]
        )
        order = distances.argsort(kind='stable')
        return [
            candidates[i] for i in order
            if min_distance <= distances[i] <= max_distance
        ]
    
    async def find_within_polygon(self, polygon: Mapping[str, Any],
                                  projection: Sequence[str]) -> List[Dict[str, Any]]:
        try:
            boundary = polygon_to_shape(polygon)
        except ValueError as e:
            raise StoreError(str(e)) from e

        lon_min, lat_min, lon_max, lat_max = boundary.bounds
        candidates = await self._run(self._find_in_bounds_sync, {
            'lat_min': lat_min, 'lat_max': lat_max,
            'lon_min': lon_min, 'lon_max': lon_max
        })
        
        return [
            self.project_record(node, projection)
            for node in candidates
            if boundary.covers(Point(node.location.coordinates))
        ]
    
    async def count(self) -> int:
        """Count stored nodes."""
        return await self._run(self._count_sync)
