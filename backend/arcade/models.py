from arcade import db
import json
import time


class Blob(db.Model):
    """One JSON document per key, with a revision counter for conditional writes."""
    __tablename__ = 'blob'
    key = db.Column(db.String(64), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    revision = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.Float, nullable=False, default=time.time)

    def load(self):
        return json.loads(self.value)

    def to_dict(self):
        return {
            'key': self.key,
            'revision': self.revision,
            'updated_at': self.updated_at,
            'value': self.load(),
        }
