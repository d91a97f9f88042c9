"""Cat classifier implementations."""

import base64
import io
import os
import random
from typing import Any, Dict, List, Optional, Tuple

import cv2
import numpy as np
import requests
from PIL import Image, UnidentifiedImageError

from ..models.config import SystemConfig
from ..config.defaults import CASCADE_SETTINGS
from ..exceptions import ClassifierUnavailableError
from .interfaces import CatClassifierInterface, ImageInput
from ..logging_config import get_logger

logger = get_logger("image_service")


def _validate_threshold(confidence_threshold: float) -> float:
    threshold = float(confidence_threshold)
    if not 0.0 <= threshold <= 100.0:
        raise ValueError(f"Confidence threshold must be within 0-100, got {threshold}")
    return threshold


def encode_jpeg(image: ImageInput, quality: int = 90) -> bytes:
    """Normalise an image to JPEG bytes.

    Raises:
        ClassifierUnavailableError: The input is empty or not a decodable image.
    """
    try:
        if isinstance(image, np.ndarray):
            pil_image = Image.fromarray(image.astype('uint8'))
        else:
            data = bytes(image)
            if not data:
                raise ClassifierUnavailableError("Empty image")
            pil_image = Image.open(io.BytesIO(data))
            pil_image.load()

        output = io.BytesIO()
        pil_image.convert('RGB').save(output, 'JPEG', quality=quality)
        return output.getvalue()
    except (UnidentifiedImageError, OSError, ValueError, TypeError) as e:
        raise ClassifierUnavailableError(f"Could not decode image: {e}") from e


class FakeCatClassifier(CatClassifierInterface):
    """Classifier that answers at random, for demos without a vision backend."""

    def __init__(self, seed: Optional[int] = None, cat_probability: float = 0.5):
        self._random = random.Random(seed)
        self.cat_probability = cat_probability

    def image_contains_cat(self, image: ImageInput, confidence_threshold: float) -> bool:
        _validate_threshold(confidence_threshold)
        result = self._random.random() < self.cat_probability
        logger.debug(f"Fake classifier result: {result}")
        return result


class RemoteVisionClassifier(CatClassifierInterface):
    """Classifier backed by a remote label-detection HTTP API.

    The image is sent as base64 JPEG with the minimum confidence. The API
    answers ``{"labels": [{"name": "Cat", "confidence": 97.1}, ...]}`` and the
    image contains a cat when any label at or above the threshold mentions
    "cat".
    """

    def __init__(self, endpoint: str, api_key: str = "", timeout_seconds: float = 10.0,
                 max_labels: int = 10):
        if not endpoint:
            raise ValueError("Remote classifier endpoint is not configured")
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.max_labels = max_labels

    def image_contains_cat(self, image: ImageInput, confidence_threshold: float) -> bool:
        threshold = _validate_threshold(confidence_threshold)
        labels = self.detect_labels(image, threshold)
        return any('cat' in name.lower() and confidence >= threshold
                   for name, confidence in labels)

    def detect_labels(self, image: ImageInput, min_confidence: float) -> List[Tuple[str, float]]:
        """Return ``(name, confidence)`` pairs for the labels found in the image."""
        payload = {
            'image': base64.b64encode(encode_jpeg(image)).decode('ascii'),
            'min_confidence': min_confidence,
            'max_labels': self.max_labels
        }

        headers = {'Content-Type': 'application/json'}
        if self.api_key:
            headers['Authorization'] = f'Bearer {self.api_key}'

        try:
            response = requests.post(
                self.endpoint,
                json=payload,
                headers=headers,
                timeout=self.timeout_seconds
            )
        except requests.Timeout as e:
            raise ClassifierUnavailableError(
                f"Vision API timed out after {self.timeout_seconds}s") from e
        except requests.RequestException as e:
            raise ClassifierUnavailableError(f"Vision API request failed: {e}") from e

        if not response.ok:
            raise ClassifierUnavailableError(
                f"Vision API returned {response.status_code}: {response.text[:100]}")

        try:
            labels = self._parse_labels(response.json())
        except (ValueError, KeyError, TypeError) as e:
            raise ClassifierUnavailableError(f"Invalid vision API response: {e}") from e

        logger.info("Detected labels: " + ", ".join(
            f"{name} ({confidence:.1f}%)" for name, confidence in labels))
        return labels

    @staticmethod
    def _parse_labels(body: Dict[str, Any]) -> List[Tuple[str, float]]:
        return [(str(label['name']), float(label['confidence'])) for label in body['labels']]


class HaarCascadeCatClassifier(CatClassifierInterface):
    """Local classifier using OpenCV's cat-face Haar cascades.

    Confidence is derived from how many neighbouring windows agree on a face:
    ``neighbors_for_full_confidence`` agreeing windows count as 100%.
    """

    def __init__(self, cascade_path: str = "",
                 scale_factor: float = CASCADE_SETTINGS["scale_factor"],
                 min_neighbors: int = CASCADE_SETTINGS["min_neighbors"],
                 min_size: Tuple[int, int] = CASCADE_SETTINGS["min_size"]):
        self.cascade_path = cascade_path
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.min_size = min_size
        self.full_confidence_neighbors = CASCADE_SETTINGS["neighbors_for_full_confidence"]
        self.haar_cascade = None

    def load_model(self) -> None:
        """Load the configured cascade, or the first built-in cat cascade."""
        candidates = [self.cascade_path] if self.cascade_path else [
            os.path.join(cv2.data.haarcascades, name)
            for name in CASCADE_SETTINGS["cascade_files"]
        ]

        for path in candidates:
            if not os.path.exists(path):
                logger.debug(f"Cascade not found: {path}")
                continue
            cascade = cv2.CascadeClassifier(path)
            if not cascade.empty():
                self.haar_cascade = cascade
                logger.info(f"Loaded Haar cascade: {path}")
                return

        raise ClassifierUnavailableError(f"No usable cat cascade among {candidates}")

    def image_contains_cat(self, image: ImageInput, confidence_threshold: float) -> bool:
        threshold = _validate_threshold(confidence_threshold)
        confidences = self.detect_confidences(image)
        logger.debug(f"Cat face confidences: {confidences}")
        return any(confidence >= threshold for confidence in confidences)

    def detect_confidences(self, image: ImageInput) -> List[float]:
        """Return a confidence percentage for every cat face found."""
        if self.haar_cascade is None:
            self.load_model()

        frame = self._decode(image)

        try:
            gray = self._preprocess_frame(frame)
            _, neighbor_counts = self.haar_cascade.detectMultiScale2(
                gray,
                scaleFactor=self.scale_factor,
                minNeighbors=self.min_neighbors,
                minSize=self.min_size
            )
        except cv2.error as e:
            raise ClassifierUnavailableError(f"Cascade detection failed: {e}") from e

        return [min(100.0, 100.0 * int(count) / self.full_confidence_neighbors)
                for count in np.ravel(neighbor_counts)]

    @staticmethod
    def _decode(image: ImageInput) -> np.ndarray:
        if isinstance(image, np.ndarray):
            frame = image
        else:
            buffer = np.frombuffer(bytes(image), dtype=np.uint8)
            frame = cv2.imdecode(buffer, cv2.IMREAD_COLOR) if buffer.size else None

        if frame is None or frame.size == 0:
            raise ClassifierUnavailableError("Could not decode image")
        return frame

    @staticmethod
    def _preprocess_frame(frame: np.ndarray) -> np.ndarray:
        """Convert to grayscale and equalise contrast for the cascade."""
        if frame.ndim == 3:
            gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        else:
            gray = frame.astype(np.uint8)
        return cv2.equalizeHist(gray)


def create_classifier(config: SystemConfig) -> CatClassifierInterface:
    """Build the classifier selected by ``config.classifier_backend``."""
    backend = config.classifier_backend.lower()

    if backend == "remote":
        return RemoteVisionClassifier(
            endpoint=config.classifier_endpoint,
            api_key=config.classifier_api_key,
            timeout_seconds=config.classifier_timeout_seconds
        )
    if backend == "haar":
        return HaarCascadeCatClassifier(cascade_path=config.cascade_path)
    if backend == "fake":
        return FakeCatClassifier()

    raise ValueError(f"Unknown classifier backend: {config.classifier_backend}")
