"""
Schema Store - 스키마 문서 영속화

현재 스키마 문서 전체를 저장/로드하는 저장소 추상화.
save 는 항상 문서 전체를 덮어쓰며, 중간에 실패해도
이전에 저장된 문서가 손상되지 않아야 한다.

구현체:
- JsonFileSchemaStore: 임시 파일 작성 -> fsync -> os.replace
- MongoSchemaStore: schemaName 기준 단일 문서 replace_one(upsert)
- InMemorySchemaStore: 테스트 / 개발용
"""

import copy
import json
import os
import tempfile
import threading
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pymongo.errors import PyMongoError

from .models import SchemaDocument

logger = logging.getLogger(__name__)

SEED_DIR = Path(__file__).resolve().parent.parent.parent / "schema"


class SchemaStoreError(Exception):
    """스키마 저장소 I/O 실패"""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.message = message
        self.cause = cause
        super().__init__(message)


def load_seed(schema_name: str, seed_dir: Union[str, Path, None] = None) -> SchemaDocument:
    """
    패키지에 포함된 시드 스키마 로드

    Args:
        schema_name: 스키마 이름 (finance, k12)
        seed_dir: 시드 디렉토리 (None이면 app/schema)
    """
    path = Path(seed_dir or SEED_DIR) / f"{schema_name}_schema.json"
    try:
        with open(path, "r", encoding="utf-8") as f:
            return SchemaDocument.from_dict(json.load(f))
    except (OSError, ValueError, KeyError) as e:
        raise SchemaStoreError(f"Cannot read seed schema {path}: {e}", cause=e) from e


class SchemaStore(ABC):
    """스키마 저장소 인터페이스"""

    @abstractmethod
    def load(self) -> SchemaDocument:
        """현재 저장된 스키마 문서 로드"""

    @abstractmethod
    def save(self, document: SchemaDocument) -> SchemaDocument:
        """
        스키마 문서 전체 저장

        Returns:
            저장한 문서 (쓰기 후 다시 읽지 않음)

        Raises:
            SchemaStoreError: 저장 실패 시 (기존 문서는 그대로 유지)
        """


class InMemorySchemaStore(SchemaStore):
    """인메모리 스키마 저장소"""

    def __init__(self, document: SchemaDocument):
        self._data: Dict[str, Any] = document.to_dict()
        self._lock = threading.Lock()
        self.save_count = 0

    def load(self) -> SchemaDocument:
        with self._lock:
            return SchemaDocument.from_dict(copy.deepcopy(self._data))

    def save(self, document: SchemaDocument) -> SchemaDocument:
        with self._lock:
            self._data = copy.deepcopy(document.to_dict())
            self.save_count += 1
        return SchemaDocument.from_dict(document.to_dict())


class JsonFileSchemaStore(SchemaStore):
    """
    JSON 파일 기반 스키마 저장소

    같은 디렉토리에 임시 파일을 쓰고 fsync 한 뒤 os.replace 로 교체하므로
    쓰기 도중 장애가 나도 기존 파일은 온전히 남는다.
    """

    def __init__(
        self,
        path: Union[str, Path],
        schema_name: Optional[str] = None,
        seed_dir: Union[str, Path, None] = None
    ):
        """
        Args:
            path: 스키마 JSON 파일 경로
            schema_name: 파일이 없을 때 복사할 시드 스키마 이름
            seed_dir: 시드 디렉토리
        """
        self.path = Path(path)
        self.schema_name = schema_name
        self.seed_dir = seed_dir

    def load(self) -> SchemaDocument:
        if not self.path.exists():
            if not self.schema_name:
                raise SchemaStoreError(f"Schema file not found: {self.path}")
            logger.info(f"Schema file {self.path} missing, seeding from '{self.schema_name}'")
            return self.save(load_seed(self.schema_name, self.seed_dir))

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return SchemaDocument.from_dict(json.load(f))
        except (OSError, ValueError, KeyError) as e:
            raise SchemaStoreError(f"Cannot read schema file {self.path}: {e}", cause=e) from e

    def save(self, document: SchemaDocument) -> SchemaDocument:
        payload = json.dumps(document.to_dict(), indent=2, ensure_ascii=False)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            raise SchemaStoreError(f"Cannot write schema file {self.path}: {e}", cause=e) from e
        finally:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.debug(f"Schema written to {self.path}")
        return document


class MongoSchemaStore(SchemaStore):
    """
    MongoDB 기반 스키마 저장소

    Collection Structure:
    {
        _id: ObjectId,
        schemaName: str,          # 유일 키
        collectionName: str,
        historyCollectionName: str,
        version: str,
        fields: {name: {type, required, hidden, systemLevel}},
    }
    """

    COLLECTION_NAME = "schemas"

    def __init__(self, mongo_service, schema_name: str, seed_dir: Union[str, Path, None] = None):
        """
        Args:
            mongo_service: MongoService 인스턴스
            schema_name: 스키마 이름 (문서 키)
            seed_dir: 문서가 없을 때 사용할 시드 디렉토리
        """
        self.mongo = mongo_service
        self.schema_name = schema_name
        self.seed_dir = seed_dir

    def _get_collection(self):
        """MongoDB 컬렉션 반환"""
        return self.mongo.db[self.COLLECTION_NAME]

    def _find(self, schema_name: str) -> Optional[Dict[str, Any]]:
        try:
            return self._get_collection().find_one({"schemaName": schema_name}, {"_id": 0})
        except PyMongoError as e:
            raise SchemaStoreError(f"Cannot load schema '{schema_name}': {e}", cause=e) from e

    def load(self) -> SchemaDocument:
        doc = self._find(self.schema_name)
        if doc is None:
            logger.info(f"Schema '{self.schema_name}' not in MongoDB, seeding")
            return self.save(load_seed(self.schema_name, self.seed_dir))
        return SchemaDocument.from_dict(doc)

    def save(self, document: SchemaDocument) -> SchemaDocument:
        try:
            # 단일 문서 교체는 원자적
            self._get_collection().replace_one(
                {"schemaName": document.schemaName},
                document.to_dict(),
                upsert=True
            )
        except PyMongoError as e:
            raise SchemaStoreError(f"Cannot save schema '{document.schemaName}': {e}", cause=e) from e
        return document
