"""Content hashes for comparing regenerated output."""
import hashlib
import json
import os
from typing import Any, Dict


class SnapshotHashService:
    """Service for hashing written output, ignoring run timestamps."""
    
    # Top-level keys only; field names inside objects are data.
    EXCLUDED_FIELDS = {'generated'}
    
    @staticmethod
    def generate_hash(data: Any) -> str:
        """Generate SHA-512 hash for data."""
        normalized = SnapshotHashService._normalize_data(data)
        json_str = json.dumps(normalized, sort_keys=True, separators=(',', ':'), ensure_ascii=False)
        return hashlib.sha512(json_str.encode('utf-8')).hexdigest()
    
    @staticmethod
    def hash_directory(output_dir: str) -> str:
        """Hash every JSON file below output_dir, keyed by relative path."""
        files: Dict[str, str] = {}
        for root, dirs, names in os.walk(output_dir):
            dirs.sort()
            for name in sorted(names):
                if not name.endswith('.json'):
                    continue
                path = os.path.join(root, name)
                rel = os.path.relpath(path, output_dir).replace(os.sep, '/')
                with open(path, encoding='utf-8') as f:
                    files[rel] = SnapshotHashService.generate_hash(json.load(f))
        return SnapshotHashService.generate_hash(files)
    
    @staticmethod
    def _normalize_data(data: Any) -> Any:
        """Normalize data by removing excluded top-level fields."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if k not in SnapshotHashService.EXCLUDED_FIELDS}
        return data
