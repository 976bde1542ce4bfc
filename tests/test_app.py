import io
import os
import tempfile
import threading
import time
import unittest
from datetime import datetime, timedelta

from app import app, cleanup_old_jobs, processing_jobs
from pdf_fixtures import create_statement_pdf


class AppTestCase(unittest.TestCase):
  def setUp(self):
    self.tmp = tempfile.TemporaryDirectory()
    self.old_folder = app.config['UPLOAD_FOLDER']
    app.config['TESTING'] = True
    app.config['UPLOAD_FOLDER'] = self.tmp.name
    self.client = app.test_client()

  def tearDown(self):
    app.config['UPLOAD_FOLDER'] = self.old_folder
    processing_jobs.clear()
    self.tmp.cleanup()


class ParseEndpointTest(AppTestCase):
  def test_multi(self):
    response = self.client.post('/parse', json={'text': 'Food 60k, Fuel 40k'})
    self.assertEqual(response.status_code, 200)
    data = response.get_json()
    self.assertTrue(data['success'])
    self.assertEqual(data['result']['sourceType'], 'list')
    self.assertEqual(data['result']['totalAmount'], 100000)

  def test_quick_and_voice(self):
    data = self.client.post('/parse', json={'text': 'uber 50', 'mode': 'quick'}).get_json()
    self.assertEqual(data['result']['category'], 'Transportation')
    data = self.client.post('/parse', json={'text': 'no money here', 'mode': 'voice'}).get_json()
    self.assertFalse(data['success'])
    self.assertIsNone(data['result'])

  def test_bad_requests(self):
    self.assertEqual(self.client.post('/parse', json={'text': ''}).status_code, 400)
    self.assertEqual(self.client.post('/parse', data='not json').status_code, 400)
    self.assertEqual(self.client.post('/parse', json={'text': 'uber 50', 'mode': 'ocr'}).status_code, 400)


class JobEndpointTest(AppTestCase):
  def test_index(self):
    self.assertIn('/upload', self.client.get('/').get_json()['endpoints'])

  def test_unknown_jobs(self):
    self.assertEqual(self.client.get('/status/nope').status_code, 404)
    self.assertEqual(self.client.get('/download/nope').status_code, 404)
    self.assertEqual(self.client.post('/cancel/nope').status_code, 404)

  def test_cleanup_removes_only_expired_jobs(self):
    stale = threading.Event()
    processing_jobs['old'] = {
      'created_at': datetime.now() - app.config['JOB_MAX_AGE'] - timedelta(minutes=1),
      'cancel_event': stale,
      'files': [],
    }
    processing_jobs['fresh'] = {
      'created_at': datetime.now(),
      'cancel_event': threading.Event(),
      'files': [],
    }
    cleanup_old_jobs()
    self.assertEqual(list(processing_jobs), ['fresh'])
    self.assertTrue(stale.is_set())

  def test_upload_validation(self):
    self.assertEqual(self.client.post('/upload', data={}).status_code, 400)
    response = self.client.post(
      '/upload',
      data={'files': (io.BytesIO(b'hello'), 'notes.txt')},
      content_type='multipart/form-data',
    )
    self.assertEqual(response.status_code, 400)

  def test_upload_process_download(self):
    pdf_path = os.path.join(self.tmp.name, 'source.pdf')
    create_statement_pdf(pdf_path)
    with open(pdf_path, 'rb') as f:
      response = self.client.post(
        '/upload',
        data={'files': (io.BytesIO(f.read()), 'march.pdf')},
        content_type='multipart/form-data',
      )
    self.assertEqual(response.status_code, 200)
    job_id = response.get_json()['job_id']

    deadline = time.time() + 30
    status = {}
    while time.time() < deadline:
      status = self.client.get(f'/status/{job_id}').get_json()
      if status['status'] != 'processing':
        break
      time.sleep(0.1)

    self.assertEqual(status['status'], 'completed', status)
    self.assertEqual(status['extracted_records'], 3)
    self.assertEqual(status['progress'], 100)

    download = self.client.get(f'/download/{job_id}')
    self.assertEqual(download.status_code, 200)
    body = download.data.decode('utf-8')
    download.close()
    self.assertIn('UBER TRIP LAGOS', body)
    self.assertIn('march.pdf', body)


if __name__ == '__main__':
  unittest.main()
