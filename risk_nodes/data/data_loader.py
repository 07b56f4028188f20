"""
Risk node loader for GeoJSON seed files.
"""

import json
import logging
import os
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


def _parse_edges(raw_edges: Any, cnn: str) -> List[Dict[str, str]]:
    """Accept edges as ``["B", ...]`` or ``[{"cnn": "B"}, ...]``."""
    if raw_edges is None:
        return []
    if not isinstance(raw_edges, list):
        raise ValueError(f"Edges for node {cnn} must be a list")
    
    edges = []
    for edge in raw_edges:
        if isinstance(edge, dict):
            edges.append({'cnn': str(edge['cnn'])})
        else:
            edges.append({'cnn': str(edge)})
    return edges


def load_risk_nodes(data_path: str) -> List[Dict[str, Any]]:
    """
    Load risk node records from a GeoJSON FeatureCollection.
    
    Each Point feature becomes one record. Its properties must carry ``cnn``
    and ``risk``; ``edges`` is optional. Batch tags are applied on creation.
    
    Args:
        data_path: Path to the GeoJSON file
        
    Returns:
        List of wire records ready for ``RiskNodeService.create_nodes``
        
    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the data format is invalid
    """
    if not os.path.exists(data_path):
        raise FileNotFoundError(f"Risk node data file not found: {data_path}")
    
    logger.info(f"Loading risk nodes from: {data_path}")
    
    try:
        with open(data_path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON format in risk node data file: {e}")
    
    if 'features' not in data:
        raise ValueError("Risk node data must be in GeoJSON format with 'features' key")
    
    records = []
    skipped = 0
    
    for feature in data['features']:
        geometry = feature.get('geometry') or {}
        if geometry.get('type') != 'Point':
            skipped += 1
            continue
        
        coords = geometry.get('coordinates') or []
        if len(coords) < 2:
            skipped += 1
            continue
        
        properties = feature.get('properties') or {}
        if 'cnn' not in properties or 'risk' not in properties:
            raise ValueError(f"Feature is missing 'cnn' or 'risk': {properties}")
        
        cnn = str(properties['cnn'])
        record = {
            'cnn': cnn,
            'risk': float(properties['risk']),
            'location': {'type': 'Point', 'coordinates': [coords[0], coords[1]]},
            'edges': _parse_edges(properties.get('edges'), cnn),
        }
        records.append(record)
    
    if skipped:
        logger.warning(f"Skipped {skipped} non-Point features in {data_path}")
    
    logger.info(f"Loaded {len(records)} risk nodes")
    return records
