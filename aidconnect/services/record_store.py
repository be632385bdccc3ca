"""Persistence for the ngos and uploads collections.

Every operation reloads the whole collection from its backend; nothing is
cached between calls. Writers of one collection are serialized through
``lock(collection)``, which callers hold across a load/modify/save cycle.
Only writers inside this process are covered.
"""
import copy
import json
import os
import tempfile
import threading
from contextlib import contextmanager

from flask import current_app

from aidconnect import db
from aidconnect.errors import NotFound
from aidconnect.models import COLLECTIONS, NGOS, UPLOADS, StoredRecord

JSON_FILENAMES = {
    NGOS: 'ngousers.json',
    UPLOADS: 'uploads.json',
}


class RecordStore:
    """Base class; backends implement ``_read`` and ``_write``."""

    def __init__(self):
        self._locks = {name: threading.RLock() for name in COLLECTIONS}

    def _check(self, collection):
        if collection not in COLLECTIONS:
            raise ValueError(f'Unknown collection: {collection!r}')

    def _read(self, collection):
        raise NotImplementedError

    def _write(self, collection, records):
        raise NotImplementedError

    @contextmanager
    def lock(self, collection):
        self._check(collection)
        with self._locks[collection]:
            yield

    def load_all(self, collection):
        self._check(collection)
        return self._read(collection)

    def save_all(self, collection, records):
        self._check(collection)
        with self.lock(collection):
            self._write(collection, list(records))

    def find(self, collection, field, value):
        for record in self.load_all(collection):
            if record.get(field) == value:
                return record
        return None

    def index_of(self, collection, field, value):
        for index, record in enumerate(self.load_all(collection)):
            if record.get(field) == value:
                return index
        return -1

    def upsert(self, collection, field, record):
        with self.lock(collection):
            records = self.load_all(collection)
            for index, existing in enumerate(records):
                if existing.get(field) == record.get(field):
                    records[index] = record
                    break
            else:
                records.append(record)
            self.save_all(collection, records)
        return record

    def delete_at(self, collection, index):
        with self.lock(collection):
            records = self.load_all(collection)
            if index < 0 or index >= len(records):
                raise NotFound(f'No record at position {index}')
            removed = records.pop(index)
            self.save_all(collection, records)
        return removed

    def delete_where(self, collection, field, value):
        with self.lock(collection):
            index = self.index_of(collection, field, value)
            if index == -1:
                raise NotFound(f'No record with {field}={value!r}')
            return self.delete_at(collection, index)


class MemoryRecordStore(RecordStore):
    def __init__(self):
        super().__init__()
        self._data = {name: [] for name in COLLECTIONS}

    def _read(self, collection):
        return copy.deepcopy(self._data[collection])

    def _write(self, collection, records):
        self._data[collection] = copy.deepcopy(records)


class JsonFileRecordStore(RecordStore):
    """One pretty-printed JSON array per collection inside ``data_dir``."""

    def __init__(self, data_dir):
        super().__init__()
        self.data_dir = data_dir

    def path_for(self, collection):
        return os.path.join(self.data_dir, JSON_FILENAMES[collection])

    def _read(self, collection):
        path = self.path_for(collection)
        if not os.path.exists(path):
            return []
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def _write(self, collection, records):
        os.makedirs(self.data_dir, exist_ok=True)
        path = self.path_for(collection)
        fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix='.' + JSON_FILENAMES[collection])
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(records, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class SqlRecordStore(RecordStore):
    """Rows in ``stored_record``; needs an application context."""

    def _read(self, collection):
        rows = StoredRecord.query.filter_by(collection=collection) \
            .order_by(StoredRecord.position).all()
        return [copy.deepcopy(row.body) for row in rows]

    def _write(self, collection, records):
        try:
            StoredRecord.query.filter_by(collection=collection).delete(synchronize_session=False)
            for position, record in enumerate(records):
                db.session.add(StoredRecord(collection=collection, position=position, body=record))
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise


def create_record_store(app):
    backend = app.config.get('RECORD_STORE_BACKEND', 'json')
    if backend == 'json':
        return JsonFileRecordStore(app.config['DATA_DIR'])
    if backend == 'memory':
        return MemoryRecordStore()
    if backend == 'sql':
        return SqlRecordStore()
    raise ValueError(f'Unknown RECORD_STORE_BACKEND: {backend!r}')


def get_store():
    return current_app.extensions['record_store']
