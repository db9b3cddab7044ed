# ==============================================================================
# SERVICIO DE IMÁGENES - Hosting (Cloudinary) y generación por IA
# ==============================================================================
# Tres formas de obtener la imagen de un producto:
#   1. Subida sin firma con upload preset (upload_unsigned)
#   2. Subida firmada desde el servidor (upload_signed / sign_upload)
#   3. Generación con el modelo de imágenes de Gemini (data URI)
#
# Los errores del proveedor se lanzan como ImageServiceError y la ruta los
# convierte en una respuesta 502.
# ==============================================================================

import base64
import time
from typing import Any, Dict, Optional

import cloudinary
import cloudinary.uploader
import cloudinary.utils
import requests
from cloudinary.exceptions import Error as CloudinaryError
from werkzeug.utils import secure_filename

from app_pedidos import config
from app_pedidos.performance_logger import profile_function


IMAGEN_PREDICT_URL = 'https://generativelanguage.googleapis.com/v1beta/models/{model}:predict'


class ImageServiceError(Exception):
    """Fallo de configuración o del proveedor de imágenes."""


def allowed_image(filename: str) -> bool:
    """True si la extensión es de imagen (png, jpg, jpeg, gif, webp)."""
    return '.' in (filename or '') and \
        filename.rsplit('.', 1)[1].lower() in config.ALLOWED_IMAGE_EXTENSIONS


class ImageService:
    """
    Cliente de los proveedores de imágenes.

    Responsabilidades:
    - Validar el archivo subido (solo imágenes)
    - Subir a Cloudinary (con preset o firmado) y devolver secure_url
    - Firmar subidas hechas desde el navegador
    - Generar imágenes de producto con IA
    """

    def __init__(
        self,
        cloud_name: str = None,
        upload_preset: str = None,
        api_key: str = None,
        api_secret: str = None,
        gemini_api_key: str = None,
        image_model: str = None,
        shop_name: str = None,
        timeout: int = None,
        http=None
    ):
        self.cloud_name = config.CLOUDINARY_CLOUD_NAME if cloud_name is None else cloud_name
        self.upload_preset = config.CLOUDINARY_UPLOAD_PRESET if upload_preset is None else upload_preset
        self.api_key = config.CLOUDINARY_API_KEY if api_key is None else api_key
        self.api_secret = config.CLOUDINARY_API_SECRET if api_secret is None else api_secret
        self.gemini_api_key = config.GEMINI_API_KEY if gemini_api_key is None else gemini_api_key
        self.image_model = image_model or config.IMAGE_MODEL
        self.shop_name = shop_name or config.SHOP_NAME
        self.timeout = timeout or config.HTTP_TIMEOUT
        self.http = http or requests

        if self.cloud_name:
            cloudinary.config(
                cloud_name=self.cloud_name,
                api_key=self.api_key or None,
                api_secret=self.api_secret or None,
                secure=True
            )

    # =========================================================================
    # CLOUDINARY
    # =========================================================================

    def _read_file(self, file) -> Dict[str, Any]:
        """
        Valida y lee un archivo subido (werkzeug FileStorage).

        Raises:
            ValueError: Si no hay archivo o no es una imagen permitida
        """
        if file is None or not getattr(file, 'filename', ''):
            raise ValueError('No se envió ningún archivo')
        filename = secure_filename(file.filename) or 'imagen'
        if not allowed_image(file.filename):
            raise ValueError('Solo se permiten imágenes (png, jpg, jpeg, gif, webp)')
        content = file.read()
        if not content:
            raise ValueError('El archivo está vacío')
        return {'filename': filename, 'content': content}

    def _upload(self, upload: Dict[str, Any], **options) -> str:
        try:
            result = cloudinary.uploader.upload(
                upload['content'],
                cloud_name=self.cloud_name,
                filename=upload['filename'],
                timeout=self.timeout,
                **options
            )
        except CloudinaryError as e:
            print(f"[ERROR] Subida a Cloudinary falló: {e}")
            raise ImageServiceError('No se pudo subir la imagen.') from e

        secure_url = (result or {}).get('secure_url')
        if not secure_url:
            raise ImageServiceError('El servicio de imágenes no devolvió una URL segura.')
        return secure_url

    @profile_function(name="Subir imagen (preset)")
    def upload_unsigned(self, file) -> str:
        """
        Sube una imagen con el upload preset.

        Args:
            file: Archivo del formulario (campo 'image')

        Returns:
            secure_url de la imagen

        Raises:
            ValueError: Archivo inválido
            ImageServiceError: Falta configuración o el proveedor falló
        """
        upload = self._read_file(file)
        if not self.cloud_name or not self.upload_preset:
            print("[ADVERTENCIA] Falta CLOUDINARY_CLOUD_NAME o CLOUDINARY_UPLOAD_PRESET")
            raise ImageServiceError('El servidor no está configurado para subir imágenes.')
        return self._upload(upload, upload_preset=self.upload_preset, unsigned=True)

    def sign_upload(self, timestamp: Optional[int] = None) -> Dict[str, Any]:
        """
        Firma una subida para el navegador.

        Returns:
            {'signature', 'timestamp', 'api_key', 'cloud_name'}

        Raises:
            ImageServiceError: Falta configuración de la cuenta
        """
        if not self.cloud_name or not self.api_key or not self.api_secret:
            raise ImageServiceError('El servidor no está configurado para firmar subidas.')
        timestamp = timestamp or int(time.time())
        return {
            'signature': cloudinary.utils.api_sign_request({'timestamp': timestamp}, self.api_secret),
            'timestamp': timestamp,
            'api_key': self.api_key,
            'cloud_name': self.cloud_name,
        }

    @profile_function(name="Subir imagen (firmada)")
    def upload_signed(self, file) -> str:
        """
        Sube una imagen firmada en el servidor con las credenciales de la cuenta.

        Returns:
            secure_url de la imagen
        """
        upload = self._read_file(file)
        if not self.cloud_name or not self.api_key or not self.api_secret:
            raise ImageServiceError('El servidor no está configurado para firmar subidas.')
        return self._upload(upload, api_key=self.api_key, api_secret=self.api_secret)

    def upload(self, file) -> str:
        """Sube con firma si hay credenciales; si no, con el upload preset."""
        if self.api_key and self.api_secret:
            return self.upload_signed(file)
        return self.upload_unsigned(file)

    # =========================================================================
    # GENERACIÓN POR IA
    # =========================================================================

    def build_prompt(self, product_name: str) -> str:
        return (f'Una fotografía de comida profesional y apetitosa de un "{product_name}" '
                f'de "{self.shop_name}". La imagen debe ser de alta calidad, bien iluminada, '
                f'sobre un fondo blanco y limpio. Estilo fotorealista.')

    @profile_function(name="Generar imagen IA")
    def generate_product_image(self, product_name: str) -> str:
        """
        Genera la foto de un producto.

        Args:
            product_name: Nombre del producto

        Returns:
            data URI 'data:<mime>;base64,...'

        Raises:
            ValueError: Nombre vacío
            ImageServiceError: Falta la API key o la respuesta no trae imagen
        """
        product_name = (product_name or '').strip()
        if not product_name:
            raise ValueError('Escribe el nombre del producto para generar la imagen')
        if not self.gemini_api_key:
            raise ImageServiceError('El servidor no está configurado para generar imágenes.')

        try:
            r = self.http.post(
                IMAGEN_PREDICT_URL.format(model=self.image_model),
                json={
                    'instances': [{'prompt': self.build_prompt(product_name)}],
                    'parameters': {'sampleCount': 1, 'aspectRatio': '3:2'},
                },
                headers={'x-goog-api-key': self.gemini_api_key},
                timeout=self.timeout
            )
            r.raise_for_status()
            payload = r.json()
        except requests.RequestException as e:
            print(f"[ERROR] Generación de imagen falló: {e}")
            raise ImageServiceError('No se pudo generar la imagen.') from e
        except ValueError as e:
            raise ImageServiceError('Respuesta inválida del generador de imágenes.') from e

        predictions = payload.get('predictions') or []
        image_b64 = predictions[0].get('bytesBase64Encoded') if predictions else None
        if not image_b64:
            raise ImageServiceError('La generación de imagen no devolvió una imagen.')
        mime = predictions[0].get('mimeType') or 'image/png'
        # Validar que el contenido sea base64
        try:
            base64.b64decode(image_b64, validate=True)
        except (ValueError, TypeError) as e:
            raise ImageServiceError('La imagen generada no es válida.') from e
        return f"data:{mime};base64,{image_b64}"
