import base64
import hashlib
from io import BytesIO
from unittest.mock import MagicMock, patch

import pytest
from cloudinary.exceptions import Error as CloudinaryError
from werkzeug.datastructures import FileStorage

from app_pedidos.services.image_service import ImageService, ImageServiceError, allowed_image

PNG_BYTES = b'\x89PNG\r\n\x1a\nfake'


def upload_file(name='perro.png', content=PNG_BYTES):
    return FileStorage(stream=BytesIO(content), filename=name, content_type='image/png')


def http_returning(payload):
    http = MagicMock()
    http.post.return_value.json.return_value = payload
    return http


def service(http=None, **overrides):
    options = dict(cloud_name='demo', upload_preset='pedidos', api_key='', api_secret='',
                   gemini_api_key='clave-gemini', image_model='imagen-test', shop_name='La Perrada',
                   timeout=5, http=http or MagicMock())
    options.update(overrides)
    return ImageService(**options)


def test_allowed_image():
    assert allowed_image('foto.JPG')
    assert allowed_image('foto.webp')
    assert not allowed_image('script.exe')
    assert not allowed_image('sin_extension')


@patch('cloudinary.uploader.upload')
def test_unsigned_upload_returns_secure_url(upload):
    upload.return_value = {'secure_url': 'https://res.cloudinary.com/demo/perro.png'}
    url = service().upload(upload_file())
    assert url == 'https://res.cloudinary.com/demo/perro.png'

    args, kwargs = upload.call_args
    assert args[0] == PNG_BYTES
    assert kwargs['upload_preset'] == 'pedidos'
    assert kwargs['unsigned'] is True
    assert kwargs['cloud_name'] == 'demo'
    assert kwargs['filename'] == 'perro.png'
    assert kwargs['timeout'] == 5
    assert 'api_secret' not in kwargs


@patch('cloudinary.uploader.upload')
def test_signed_upload_when_credentials_exist(upload):
    upload.return_value = {'secure_url': 'https://res.cloudinary.com/demo/x.png'}
    svc = service(api_key='123', api_secret='secreto')
    assert svc.upload(upload_file()) == 'https://res.cloudinary.com/demo/x.png'

    kwargs = upload.call_args.kwargs
    assert kwargs['api_key'] == '123'
    assert kwargs['api_secret'] == 'secreto'
    assert 'unsigned' not in kwargs


def test_sign_upload_uses_cloudinary_signature():
    with pytest.raises(ImageServiceError):
        service().sign_upload()

    signed = service(api_key='123', api_secret='secreto').sign_upload(timestamp=1700000000)
    expected = hashlib.sha1(b'timestamp=1700000000secreto').hexdigest()
    assert signed == {'signature': expected, 'timestamp': 1700000000,
                      'api_key': '123', 'cloud_name': 'demo'}


@patch('cloudinary.uploader.upload')
def test_invalid_files_raise_value_error(upload):
    svc = service()
    with pytest.raises(ValueError):
        svc.upload(None)
    with pytest.raises(ValueError):
        svc.upload(upload_file(name='virus.exe'))
    with pytest.raises(ValueError):
        svc.upload(upload_file(content=b''))
    upload.assert_not_called()


@patch('cloudinary.uploader.upload')
def test_missing_configuration(upload):
    with pytest.raises(ImageServiceError):
        service(cloud_name='').upload(upload_file())
    upload.assert_not_called()


@patch('cloudinary.uploader.upload')
def test_provider_error_becomes_image_service_error(upload):
    upload.side_effect = CloudinaryError('Upload preset not found')
    with pytest.raises(ImageServiceError):
        service().upload(upload_file())

    upload.side_effect = None
    upload.return_value = {'public_id': 'sin-url'}
    with pytest.raises(ImageServiceError):
        service().upload(upload_file())


def test_generate_product_image_returns_data_uri():
    encoded = base64.b64encode(PNG_BYTES).decode('ascii')
    http = http_returning({'predictions': [{'bytesBase64Encoded': encoded, 'mimeType': 'image/png'}]})
    uri = service(http).generate_product_image('Perro Especial')
    assert uri == f'data:image/png;base64,{encoded}'

    args, kwargs = http.post.call_args
    assert 'imagen-test:predict' in args[0]
    assert kwargs['headers'] == {'x-goog-api-key': 'clave-gemini'}
    assert 'Perro Especial' in kwargs['json']['instances'][0]['prompt']
    assert kwargs['json']['parameters']['sampleCount'] == 1


def test_generate_requires_name_and_key():
    with pytest.raises(ValueError):
        service(MagicMock()).generate_product_image('   ')
    with pytest.raises(ImageServiceError):
        service(MagicMock(), gemini_api_key='').generate_product_image('Perro')


def test_generate_without_image_in_response():
    with pytest.raises(ImageServiceError):
        service(http_returning({'predictions': []})).generate_product_image('Perro')
