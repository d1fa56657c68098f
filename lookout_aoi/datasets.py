"""
Location Datasets
=================

Loads geolocated events (conversations -> messages -> locations) from YAML
or JSON and exposes them as MapPoints.

Design:
- Dataset is immutable once loaded; MapPoint instances are created once
  and shared by every query
- Keys are accepted in snake_case or camelCase
- Malformed files raise ValueError (logged as error.dataset)

Expected layout:

    conversations:
      - conversation_id: conv_001
        title: Covent Garden meetings
        timestamp: "2024-01-15T10:30:00Z"
        messages:
          - message_id: msg_covent_garden
            summary: Meetings around the piazza
            timestamp: "2024-01-15T10:30:00Z"
            locations:
              - id: loc_001
                coordinates: [-0.1235, 51.5120]
                label: Covent Garden Market
                context: Meeting point
                timestamp: "2024-01-15T10:30:00Z"
    metadata:
      clustering_test_scenarios:
        dense_cluster: msg_covent_garden
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from lookout_aoi.geometry.shapes import MapPoint
from lookout_aoi.logging import LogEvent, StructuredLogger, create_logger

LONDON_BBOX = (-0.5, 51.4, 0.1, 51.6)  # (west, south, east, north)


def _get(data: Dict[str, Any], snake: str, camel: str, default: Any = None) -> Any:
    if snake in data:
        return data[snake]
    return data.get(camel, default)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO-8601 timestamp ('Z' suffix allowed); None stays None."""
    if value is None or isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    return datetime.fromisoformat(text)


@dataclass(frozen=True)
class MessageGroup:
    """Locations extracted from one message."""

    message_id: str
    summary: str
    locations: Tuple[MapPoint, ...]
    timestamp: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MessageGroup":
        message_id = str(_get(data, 'message_id', 'messageId', ''))
        if not message_id:
            raise ValueError("Message requires a message_id")
        return cls(
            message_id=message_id,
            summary=str(data.get('summary', '')),
            locations=tuple(
                MapPoint.from_dict(location, message_id=message_id)
                for location in data.get('locations', [])
            ),
            timestamp=parse_timestamp(data.get('timestamp')),
        )


@dataclass(frozen=True)
class Conversation:
    conversation_id: str
    title: str
    messages: Tuple[MessageGroup, ...]
    timestamp: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Conversation":
        return cls(
            conversation_id=str(_get(data, 'conversation_id', 'conversationId', '')),
            title=str(data.get('title', '')),
            messages=tuple(MessageGroup.from_dict(m) for m in data.get('messages', [])),
            timestamp=parse_timestamp(data.get('timestamp')),
        )


@dataclass(frozen=True)
class EventDataset:
    """In-memory location dataset."""

    conversations: Tuple[Conversation, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EventDataset":
        """
        Build from the parsed file content.

        Raises:
            ValueError: If the structure or a location is malformed
        """
        if not isinstance(data, dict):
            raise ValueError(f"Dataset root must be a mapping, got {type(data).__name__}")
        conversations = data.get('conversations', [])
        if not isinstance(conversations, list):
            raise ValueError("'conversations' must be a list")
        try:
            return cls(
                conversations=tuple(Conversation.from_dict(c) for c in conversations),
                metadata=dict(data.get('metadata') or {}),
            )
        except (AttributeError, TypeError) as e:
            raise ValueError(f"Malformed dataset: {e}")

    def messages(self) -> List[MessageGroup]:
        return [message for conversation in self.conversations for message in conversation.messages]

    def all_locations(self) -> List[MapPoint]:
        """Every location, in file order."""
        return [location for message in self.messages() for location in message.locations]

    def locations_by_conversation(self, conversation_id: str) -> List[MessageGroup]:
        for conversation in self.conversations:
            if conversation.conversation_id == conversation_id:
                return list(conversation.messages)
        return []

    def locations_by_message(self, message_id: str) -> List[MapPoint]:
        for message in self.messages():
            if message.message_id == message_id:
                return list(message.locations)
        return []

    def locations_in_bbox(
        self,
        west: float,
        south: float,
        east: float,
        north: float
    ) -> List[MapPoint]:
        """Locations inside the box, edges included."""
        return [
            location for location in self.all_locations()
            if west <= location.lng <= east and south <= location.lat <= north
        ]

    def locations_outside_bbox(
        self,
        west: float,
        south: float,
        east: float,
        north: float
    ) -> List[MapPoint]:
        inside = {id(location) for location in self.locations_in_bbox(west, south, east, north)}
        return [location for location in self.all_locations() if id(location) not in inside]

    def clustering_scenarios(self) -> Dict[str, List[MapPoint]]:
        """Named point sets from metadata.clustering_test_scenarios (name -> message id)."""
        scenarios = self.metadata.get('clustering_test_scenarios') or {}
        return {
            name: self.locations_by_message(str(message_id))
            for name, message_id in scenarios.items()
        }

    def stats(self) -> Dict[str, Any]:
        coverage = self.metadata.get('geographic_coverage') or {}
        return {
            'conversations': len(self.conversations),
            'messages': len(self.messages()),
            'locations': len(self.all_locations()),
            'london_locations': len(self.locations_in_bbox(*LONDON_BBOX)),
            'international_locations': len(self.locations_outside_bbox(*LONDON_BBOX)),
            'date_range': self.metadata.get('date_range'),
            'bounding_box': coverage.get('bounding_box'),
        }


def load_events(
    path: Union[str, Path],
    logger: Optional[StructuredLogger] = None
) -> EventDataset:
    """
    Load a dataset from a .json, .yaml or .yml file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file cannot be parsed
    """
    logger = logger or create_logger("datasets")
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found: {path}")

    try:
        with open(path) as f:
            if path.suffix.lower() == '.json':
                data = json.load(f)
            else:
                data = yaml.safe_load(f) or {}
        dataset = EventDataset.from_dict(data)
    except (json.JSONDecodeError, yaml.YAMLError, ValueError) as e:
        logger.error(
            event=LogEvent.DATASET_ERROR,
            message="Failed to load dataset",
            metadata={'path': str(path), 'error': str(e)},
        )
        raise ValueError(f"Invalid dataset {path}: {e}")

    logger.info(
        event=LogEvent.DATASET_LOADED,
        message="Dataset loaded",
        metadata={
            'path': str(path),
            'conversations': len(dataset.conversations),
            'locations': len(dataset.all_locations()),
        },
    )
    return dataset
