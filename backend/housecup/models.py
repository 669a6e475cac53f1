from datetime import timezone

from flask_login import UserMixin

from housecup import bcrypt, db
from housecup.services.competition import domain
from housecup.services.competition.store import new_id


def _aware(value):
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class House(db.Model):
    __tablename__ = 'house'
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(64), unique=True, nullable=False)
    color_hex = db.Column(db.String(7), nullable=False)

    def to_domain(self):
        return domain.House(id=self.id, name=self.name, color_hex=self.color_hex)


class Category(db.Model):
    __tablename__ = 'category'
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(64), unique=True, nullable=False)  # machine key, e.g. 'adult-men'
    label = db.Column(db.String(128), nullable=False)

    def to_domain(self):
        return domain.Category(id=self.id, name=self.name, label=self.label)


class Player(db.Model):
    __tablename__ = 'player'
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    full_name = db.Column(db.String(128), nullable=False)
    # Weak references: a dangling id is tolerated by aggregation
    category_id = db.Column(db.String(32), nullable=False, index=True)
    house_id = db.Column(db.String(32), nullable=False, index=True)

    def to_domain(self):
        return domain.Player(
            id=self.id,
            full_name=self.full_name,
            category_id=self.category_id,
            house_id=self.house_id,
        )


class Event(db.Model):
    __tablename__ = 'event'
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(128), nullable=False)
    category_id = db.Column(db.String(32), nullable=False, index=True)
    type = db.Column(db.String(16), nullable=False)  # individual, group
    status = db.Column(db.String(16), nullable=False, default='scheduled', index=True)  # scheduled, in-progress, completed
    scoring = db.Column(db.JSON, nullable=False)  # {"1": 5, "2": 3, ...}
    start_time = db.Column(db.DateTime(timezone=True), nullable=True)
    end_time = db.Column(db.DateTime(timezone=True), nullable=True)
    results = db.Column(db.JSON(none_as_null=True), nullable=True)  # [{"placement": 1, "participant_id": "..."}]
    created_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_domain(self):
        return domain.Event(
            id=self.id,
            name=self.name,
            category_id=self.category_id,
            type=domain.EventType(self.type),
            status=domain.EventStatus(self.status),
            scoring={int(k): int(v) for k, v in (self.scoring or {}).items()},
            start_time=_aware(self.start_time),
            end_time=_aware(self.end_time),
            results=[domain.EventResult.from_dict(r) for r in self.results] if self.results is not None else None,
            created_at=_aware(self.created_at),
        )


class PlacementDefault(db.Model):
    __tablename__ = 'placement_default'
    id = db.Column(db.String(128), primary_key=True)  # placement-points-<category>-<type>
    category_id = db.Column(db.String(32), nullable=False, index=True)
    event_type = db.Column(db.String(16), nullable=False)
    placements = db.Column(db.JSON, nullable=False)

    def to_domain(self):
        return domain.PlacementDefault(
            id=self.id,
            category_id=self.category_id,
            event_type=domain.EventType(self.event_type),
            placements={int(k): int(v) for k, v in (self.placements or {}).items()},
        )
