"""
Record Repository - 레코드 문서 저장소

레코드 서비스가 사용하는 문서 저장소 인터페이스와 구현체
- MongoRecordRepository: pymongo 컬렉션
- InMemoryRecordRepository: 테스트 / 개발용
"""

import copy
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from app.services.mongo_service import MongoService, db_operation

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class RecordRepository(ABC):
    """레코드 저장소 인터페이스"""

    @abstractmethod
    def find(self, record_id: str) -> Optional[Record]:
        """ID로 레코드 조회 (없으면 None)"""

    @abstractmethod
    def find_all(self) -> List[Record]:
        """전체 레코드 조회"""

    @abstractmethod
    def insert(self, record: Record) -> Record:
        """레코드 추가"""

    @abstractmethod
    def replace(self, record_id: str, record: Record) -> Optional[Record]:
        """레코드 전체 교체 (없으면 None)"""

    @abstractmethod
    def delete(self, record_id: str) -> bool:
        """레코드 삭제 (삭제 여부 반환)"""


class InMemoryRecordRepository(RecordRepository):
    """인메모리 레코드 저장소 (삽입 순서 유지)"""

    def __init__(self, id_field: str):
        self.id_field = id_field
        self._records: Dict[str, Record] = {}
        self._lock = threading.Lock()

    def find(self, record_id: str) -> Optional[Record]:
        with self._lock:
            record = self._records.get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def find_all(self) -> List[Record]:
        with self._lock:
            return [copy.deepcopy(r) for r in self._records.values()]

    def insert(self, record: Record) -> Record:
        with self._lock:
            self._records[record[self.id_field]] = copy.deepcopy(record)
        return copy.deepcopy(record)

    def replace(self, record_id: str, record: Record) -> Optional[Record]:
        with self._lock:
            if record_id not in self._records:
                return None
            self._records[record_id] = copy.deepcopy(record)
        return copy.deepcopy(record)

    def delete(self, record_id: str) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None


class MongoRecordRepository(RecordRepository):
    """
    MongoDB 레코드 저장소

    컬렉션 이름은 스키마 문서의 collectionName 을 사용한다.
    """

    def __init__(self, mongo: MongoService, collection_name: str, id_field: str):
        self.mongo = mongo
        self.collection_name = collection_name
        self.id_field = id_field

    @property
    def collection(self):
        return self.mongo.db[self.collection_name]

    @db_operation("records", "read")
    def find(self, record_id: str) -> Optional[Record]:
        return self.collection.find_one({self.id_field: record_id}, {"_id": 0})

    @db_operation("records", "read")
    def find_all(self) -> List[Record]:
        return list(self.collection.find({}, {"_id": 0}))

    @db_operation("records", "write")
    def insert(self, record: Record) -> Record:
        doc = dict(record)
        self.collection.insert_one(doc)
        return dict(record)

    @db_operation("records", "write")
    def replace(self, record_id: str, record: Record) -> Optional[Record]:
        result = self.collection.replace_one({self.id_field: record_id}, dict(record))
        if result.matched_count == 0:
            return None
        return dict(record)

    @db_operation("records", "delete")
    def delete(self, record_id: str) -> bool:
        result = self.collection.delete_one({self.id_field: record_id})
        return result.deleted_count > 0

    @db_operation("records", "index")
    def ensure_indexes(self) -> None:
        """기본 키 유니크 인덱스 생성"""
        self.collection.create_index(self.id_field, unique=True)
        logger.info(f"Record indexes ensured: {self.collection_name}.{self.id_field}")
