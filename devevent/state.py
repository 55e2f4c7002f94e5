from typing import Optional

from devevent.images import ImageUploader

# Global runtime state initialized in lifespan.setup_resources
image_uploader: Optional[ImageUploader] = None
