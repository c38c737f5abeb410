import qrcode
from qrcode import util
from PIL import Image
from io import BytesIO
import enum

from app.core.config import settings
from app.core.exceptions import EncodingError

ERROR_CORRECTION_LEVELS = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}

MAX_QR_VERSION = 40

class ImageFormat(str, enum.Enum):
    PNG = "PNG"
    JPEG = "JPEG"

    @property
    def extension(self) -> str:
        return "jpg" if self is ImageFormat.JPEG else "png"

    @property
    def media_type(self) -> str:
        return "image/jpeg" if self is ImageFormat.JPEG else "image/png"

    @classmethod
    def parse(cls, value) -> "ImageFormat":
        try:
            return cls(str(value.value if isinstance(value, cls) else value).upper())
        except ValueError:
            raise EncodingError(f"Unsupported image format: {value}")

class QREncoder:
    """Renders payloads into QR images.

    Output depends only on the arguments and the encoder's fixed settings, so
    the same payload, size and format always give byte-identical images.
    """

    def __init__(
        self,
        border: int = 4,
        error_correction: str = "M",
        fill_color: str = "black",
        back_color: str = "white",
    ):
        if error_correction not in ERROR_CORRECTION_LEVELS:
            raise ValueError(f"Unknown error correction level: {error_correction}")
        self.border = border
        self.error_correction = ERROR_CORRECTION_LEVELS[error_correction]
        self.fill_color = fill_color
        self.back_color = back_color

    def max_version(self, size: int) -> int:
        # A version-v symbol is 17 + 4v modules wide; each module needs >= 1px.
        usable = size - 2 * self.border - 17
        return min(usable // 4, MAX_QR_VERSION)

    def capacity(self, size: int) -> int:
        """Largest byte-mode payload (in bytes) that fits an image of `size` px."""
        version = self.max_version(size)
        if version < 1:
            return 0
        data_bits = util.BIT_LIMIT_TABLE[self.error_correction][version]
        # 4-bit mode indicator plus the character count field
        length_bits = 8 if version < 10 else 16
        return (data_bits - 4 - length_bits) // 8

    def encode(self, payload: str, size: int, image_format) -> bytes:
        image_format = ImageFormat.parse(image_format)
        if size < 1:
            raise EncodingError(f"Invalid image size: {size}")

        data = payload.encode("utf-8")
        capacity = self.capacity(size)
        if capacity <= 0:
            raise EncodingError(f"Image size {size}px is too small for a QR code")
        if len(data) > capacity:
            raise EncodingError(
                f"Payload of {len(data)} bytes exceeds the {capacity}-byte capacity of a {size}px QR code"
            )

        qr = qrcode.QRCode(
            version=None,
            error_correction=self.error_correction,
            border=self.border,
        )
        qr.add_data(util.QRData(data, mode=util.MODE_8BIT_BYTE))
        qr.make(fit=True)
        qr.box_size = max(1, size // (qr.modules_count + 2 * self.border))

        img = qr.make_image(
            fill_color=self.fill_color,
            back_color=self.back_color,
        ).resize((size, size), Image.Resampling.NEAREST)

        if image_format is ImageFormat.JPEG:
            img = img.convert("RGB")

        output = BytesIO()
        img.save(output, format=image_format.value)
        return output.getvalue()

qr_encoder = QREncoder(
    border=settings.QR_BORDER,
    error_correction=settings.QR_ERROR_CORRECTION,
)
