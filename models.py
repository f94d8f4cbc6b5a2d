# models.py
"""
Entity store: criteria (columns), formulas (rows) and attributes (cells).
Helpers here flush but never commit; the table service owns the unit of work.
"""

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import UniqueConstraint
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from errors import DuplicateNameError

db = SQLAlchemy()

NA = "NA"


class Criteria(db.Model):
    __tablename__ = "criteria"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False, index=True)

    def __repr__(self):
        return f"<Criteria {self.name}>"


class Formula(db.Model):
    __tablename__ = "formula"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False, index=True)
    annotation = db.Column(db.Text, nullable=False, default="")

    attributes = db.relationship(
        "Attribute", back_populates="formula", order_by="Attribute.id", cascade="all"
    )

    def get_value(self, criterion_name):
        """Cell value under *criterion_name*, or "NA" when the cell is missing."""
        for attr in self.attributes:
            if attr.criteria is not None and attr.criteria.name == criterion_name:
                return attr.value
        return NA

    def __repr__(self):
        return f"<Formula {self.name}>"


class Attribute(db.Model):
    __tablename__ = "attribute"

    id = db.Column(db.Integer, primary_key=True)
    formula_id = db.Column(db.Integer, db.ForeignKey("formula.id", ondelete="CASCADE"), nullable=False, index=True)
    criteria_id = db.Column(db.Integer, db.ForeignKey("criteria.id", ondelete="CASCADE"), nullable=False, index=True)
    value = db.Column(db.Text, nullable=False, default=NA, server_default=NA)

    formula = db.relationship("Formula", back_populates="attributes")
    criteria = db.relationship("Criteria")

    __table_args__ = (
        UniqueConstraint("formula_id", "criteria_id", name="uq_attribute_cell"),
    )

    def __repr__(self):
        return f"<Attribute [{self.formula_id},{self.criteria_id}] = {self.value}>"


# ----------------- Lookups -----------------
def list_criteria():
    return Criteria.query.order_by(Criteria.id).all()


def list_formulas(with_attributes=False):
    query = Formula.query.order_by(Formula.id)
    if with_attributes:
        query = query.options(selectinload(Formula.attributes))
    return query.all()


def find_criterion_by_name(name):
    return Criteria.query.filter_by(name=name).first()


def find_formula_by_name(name):
    return Formula.query.filter_by(name=name).first()


def find_attribute(formula_id, criteria_id):
    return Attribute.query.filter_by(formula_id=formula_id, criteria_id=criteria_id).first()


# ----------------- Mutations -----------------
def _flush_unique(entity, kind, name):
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateNameError(f"{kind} '{name}' already exists")
    return entity


def create_criterion(name):
    column = Criteria(name=name)
    db.session.add(column)
    return _flush_unique(column, "Criteria", name)


def create_formula(name, annotation=""):
    row = Formula(name=name, annotation=annotation or "")
    db.session.add(row)
    return _flush_unique(row, "Formula", name)


def create_attribute(formula_id, criteria_id, value=NA):
    attr = Attribute(formula_id=formula_id, criteria_id=criteria_id, value=value)
    db.session.add(attr)
    return attr


def create_or_update_attribute(formula_id, criteria_id, value):
    attr = find_attribute(formula_id, criteria_id)
    if attr:
        attr.value = value
    else:
        attr = create_attribute(formula_id, criteria_id, value)
    db.session.flush()
    return attr


def delete_criterion_cascade(criterion):
    # attributes go first so a failure never leaves orphans
    for attr in Attribute.query.filter_by(criteria_id=criterion.id).all():
        db.session.delete(attr)
    db.session.flush()
    db.session.delete(criterion)
    db.session.flush()


def delete_formula_cascade(formula):
    for attr in Attribute.query.filter_by(formula_id=formula.id).all():
        db.session.delete(attr)
    db.session.flush()
    db.session.delete(formula)
    db.session.flush()


def rename_formula(formula, new_name):
    formula.name = new_name
    return _flush_unique(formula, "Formula", new_name)


def update_annotation(formula, annotation):
    formula.annotation = annotation if annotation is not None else ""
    db.session.flush()
