import pytest

from qrscan.services.image_enhancement_service import ImageEnhancementService
from qrscan.services.image_service import ImageService


@pytest.fixture
def enhancer():
    return ImageEnhancementService()


@pytest.fixture
def image_service():
    return ImageService()
