import os
import uuid
import logging
import threading
from datetime import datetime, timedelta
from flask import Flask, request, jsonify, send_file
from werkzeug.utils import secure_filename
import pandas as pd

from transactionextractor.parser import TransactionParser
from transactionextractor.statement import parse_bank_statement

logging.basicConfig(level=logging.INFO, format='%(levelname)s | %(message)s')
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['SECRET_KEY'] = os.environ.get('TRANSACTIONEXTRACTOR_SECRET_KEY', 'change-this-in-production')
app.config['UPLOAD_FOLDER'] = os.environ.get('TRANSACTIONEXTRACTOR_UPLOAD_FOLDER', 'uploads')
app.config['MAX_CONTENT_LENGTH'] = 100 * 1024 * 1024  # 100MB max upload
app.config['JOB_MAX_AGE'] = timedelta(hours=2)
app.config['PDF_BACKEND'] = 'pdfplumber'

# Jobs live in memory only; they are dropped after JOB_MAX_AGE
processing_jobs = {}


def _remove_file(path):
  if path and os.path.exists(path):
    try:
      os.remove(path)
    except OSError as e:
      logger.warning(f"Could not remove {path}: {e}")


def cleanup_old_jobs():
  """Clean up jobs older than JOB_MAX_AGE"""
  cutoff = datetime.now() - app.config['JOB_MAX_AGE']
  expired = [job_id for job_id, job in list(processing_jobs.items()) if job['created_at'] < cutoff]

  for job_id in expired:
    job = processing_jobs.pop(job_id, None)
    if not job:
      continue
    job['cancel_event'].set()
    for f in job['files']:
      _remove_file(f['path'])
    _remove_file(job.get('output_file'))
    logger.info(f"Removed expired job {job_id}")


@app.route('/')
def index():
  cleanup_old_jobs()
  return jsonify({
    'service': 'transactionextractor',
    'endpoints': ['/upload', '/status/<job_id>', '/download/<job_id>', '/cancel/<job_id>', '/parse'],
  })


@app.route('/upload', methods=['POST'])
def upload_files():
  try:
    if 'files' not in request.files:
      return jsonify({'success': False, 'error': 'No files uploaded'}), 400

    files = request.files.getlist('files')
    if not files or all(f.filename == '' for f in files):
      return jsonify({'success': False, 'error': 'No files selected'}), 400

    valid_files = [f for f in files if f and f.filename.lower().endswith('.pdf')]
    if not valid_files:
      return jsonify({'success': False, 'error': 'Please upload valid PDF files'}), 400

    cleanup_old_jobs()
    job_id = str(uuid.uuid4())
    upload_folder = app.config['UPLOAD_FOLDER']
    os.makedirs(upload_folder, exist_ok=True)

    uploaded_files = []
    for file in valid_files:
      filename = secure_filename(file.filename)
      file_path = os.path.join(upload_folder, f"{job_id}_{filename}")
      file.save(file_path)
      uploaded_files.append({
        'path': file_path,
        'original_name': file.filename,
        'size': os.path.getsize(file_path)
      })

    processing_jobs[job_id] = {
      'id': job_id,
      'status': 'processing',
      'files': uploaded_files,
      'created_at': datetime.now(),
      'progress': 0,
      'message': 'Starting processing...',
      'total_files': len(uploaded_files),
      'processed_files': 0,
      'extracted_records': 0,
      'cancel_event': threading.Event(),
      'file_errors': [],
    }

    thread = threading.Thread(target=process_bank_statements, args=(job_id,))
    thread.daemon = True
    thread.start()

    return jsonify({
      'success': True,
      'job_id': job_id,
      'message': 'Upload successful, processing started',
      'total_files': len(uploaded_files)
    })

  except Exception as e:
    logger.exception("Upload failed")
    return jsonify({'success': False, 'error': f'Upload failed: {str(e)}'}), 500


def process_bank_statements(job_id):
  """Parse every uploaded statement of a job, keeping its progress current"""
  job = processing_jobs.get(job_id)
  if not job:
    return

  try:
    total_files = job['total_files']
    frames = []

    for index, f in enumerate(job['files']):
      def progress_callback(status, percent, index=index):
        overall = (index + percent / 100) / total_files
        job['progress'] = min(int(overall * 90), 90)
        job['message'] = f"{f['original_name']}: {status}"

      result = parse_bank_statement(
        f['path'],
        progress_callback=progress_callback,
        cancel_event=job['cancel_event'],
        backend=app.config['PDF_BACKEND'],
      )
      if job['cancel_event'].is_set():
        job['status'] = 'cancelled'
        job['message'] = 'Processing cancelled'
        return

      job['processed_files'] = index + 1
      if not result.success:
        job['file_errors'].append({'file': f['original_name'], 'error': result.error})
        continue

      frame = result.to_dataframe()
      frame.insert(0, 'bank', result.bank_name or '')
      frame.insert(0, 'source_file', f['original_name'])
      frames.append(frame)

    job['progress'] = 95
    job['message'] = 'Finalizing results...'

    if not frames and job['file_errors']:
      job['status'] = 'error'
      job['progress'] = 0
      job['error'] = '; '.join(f"{e['file']}: {e['error']}" for e in job['file_errors'])
      job['message'] = f"Processing failed: {job['error']}"
      return

    results = pd.concat(frames, ignore_index=True) if frames else pd.DataFrame()
    job['status'] = 'completed'
    job['progress'] = 100
    job['extracted_records'] = len(results)
    if results.empty:
      job['message'] = 'No transactions found in the uploaded files'
      job['results'] = None
    else:
      output_file = os.path.join(app.config['UPLOAD_FOLDER'], f"{job_id}_output.csv")
      results.to_csv(output_file, index=False)
      job['output_file'] = output_file
      job['message'] = f'Successfully extracted {len(results)} transactions'
      job['results'] = {
        'total_records': len(results),
        'columns': list(results.columns),
        'preview': results.head(5).to_dict('records'),
        'file_size': os.path.getsize(output_file)
      }
    job['completed_at'] = datetime.now()

  except Exception as e:
    logger.exception(f"Job {job_id} failed")
    job['status'] = 'error'
    job['progress'] = 0
    job['message'] = f'Processing failed: {str(e)}'
    job['error'] = str(e)


@app.route('/status/<job_id>')
def get_status(job_id):
  """Get processing status for a job"""
  job = processing_jobs.get(job_id)
  if not job:
    return jsonify({'success': False, 'error': 'Job not found'}), 404

  response_data = {
    'success': True,
    'job_id': job_id,
    'status': job['status'],
    'progress': job['progress'],
    'message': job['message'],
    'total_files': job['total_files'],
    'processed_files': job['processed_files'],
    'extracted_records': job['extracted_records'],
    'file_errors': job['file_errors'],
  }

  if job['status'] == 'completed' and job.get('results'):
    response_data['results'] = job['results']
  elif job['status'] == 'error':
    response_data['error'] = job.get('error', 'Unknown error')

  return jsonify(response_data)


@app.route('/cancel/<job_id>', methods=['POST'])
def cancel_job(job_id):
  job = processing_jobs.get(job_id)
  if not job:
    return jsonify({'success': False, 'error': 'Job not found'}), 404
  job['cancel_event'].set()
  return jsonify({'success': True, 'job_id': job_id})


@app.route('/download/<job_id>')
def download_results(job_id):
  """Download CSV results for a completed job"""
  job = processing_jobs.get(job_id)
  if not job:
    return jsonify({'error': 'Job not found'}), 404

  if job['status'] != 'completed':
    return jsonify({'error': 'Job not completed yet'}), 400

  if not job.get('output_file') or not os.path.exists(job['output_file']):
    return jsonify({'error': 'Results file not found'}), 404

  timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
  download_name = f'transactions_{timestamp}_{job["extracted_records"]}records.csv'

  return send_file(
    os.path.abspath(job['output_file']),
    as_attachment=True,
    download_name=download_name,
    mimetype='text/csv'
  )


@app.route('/parse', methods=['POST'])
def parse_text():
  """Parse pasted text; mode is 'multi' (default), 'quick' or 'voice'"""
  data = request.get_json(silent=True) or {}
  text = data.get('text', '')
  if not isinstance(text, str) or not text.strip():
    return jsonify({'success': False, 'error': 'No text supplied'}), 400

  parser = TransactionParser()
  mode = data.get('mode', 'multi')
  if mode == 'multi':
    return jsonify({'success': True, 'result': parser.parse_transactions(text).to_dict()})
  if mode in ('quick', 'voice'):
    txn = parser.parse_quick_transaction(text) if mode == 'quick' else parser.parse_voice_input(text)
    return jsonify({'success': txn is not None, 'result': txn.to_dict() if txn else None})
  return jsonify({'success': False, 'error': f'Unknown mode: {mode}'}), 400


if __name__ == '__main__':
  app.run(debug=True, host='0.0.0.0', port=8080)
