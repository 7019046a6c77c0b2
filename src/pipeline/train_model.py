from __future__ import annotations

from pathlib import Path
import json
import os

import pandas as pd
import joblib

from sklearn.compose import ColumnTransformer
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler
from sklearn.impute import SimpleImputer
from sklearn.linear_model import LogisticRegression
from sklearn.calibration import CalibratedClassifierCV
from sklearn.model_selection import train_test_split
from sklearn.metrics import classification_report, confusion_matrix, accuracy_score, roc_auc_score

from src.config.settings import MODEL_DIR
from src.api.services.model_registry import NUMERIC_FEATURES, CATEGORICAL_FEATURES


IN_PATH = Path(os.getenv("TRAINING_CSV", "data_raw/diabetes_prediction_dataset.csv"))
OUT_DIR = Path(MODEL_DIR)

RANDOM_SEED = 42
TEST_SIZE = 0.2
LABEL_COL = "diabetes"

# Raw dataset column -> API wire field
COLUMN_MAP = {
    "gender": "gender",
    "age": "age",
    "hypertension": "hypertension",
    "heart_disease": "heartDisease",
    "smoking_history": "smokingHistory",
    "bmi": "bmi",
    "HbA1c_level": "hbA1cLevel",
    "blood_glucose_level": "bloodGlucoseLevel",
}

# The API only knows three smoking categories
SMOKING_MAP = {
    "never": "never",
    "former": "former",
    "ever": "former",
    "not current": "former",
    "current": "current",
}


def normalize_dataset(df: pd.DataFrame) -> pd.DataFrame:
    missing = [c for c in list(COLUMN_MAP) + [LABEL_COL] if c not in df.columns]
    if missing:
        raise ValueError(f"Missing columns in training data: {missing}")

    out = df[list(COLUMN_MAP) + [LABEL_COL]].rename(columns=COLUMN_MAP).copy()
    out["smokingHistory"] = out["smokingHistory"].map(SMOKING_MAP)
    out = out[out["gender"].isin(["Male", "Female"])]
    out = out.dropna(subset=["smokingHistory"]).copy()
    for col in NUMERIC_FEATURES:
        out[col] = out[col].astype(float)
    out[LABEL_COL] = out[LABEL_COL].astype(int)
    return out.reset_index(drop=True)


def build_pipeline() -> Pipeline:
    numeric_transformer = Pipeline(
        steps=[
            ("imputer", SimpleImputer(strategy="median")),
            ("scaler", StandardScaler()),
        ]
    )

    categorical_transformer = Pipeline(
        steps=[
            ("imputer", SimpleImputer(strategy="most_frequent")),
            ("onehot", OneHotEncoder(handle_unknown="ignore")),
        ]
    )

    preprocessor = ColumnTransformer(
        transformers=[
            ("num", numeric_transformer, NUMERIC_FEATURES),
            ("cat", categorical_transformer, CATEGORICAL_FEATURES),
        ]
    )

    return Pipeline(
        steps=[
            ("preprocess", preprocessor),
            ("clf", LogisticRegression(solver="lbfgs", max_iter=5000, random_state=RANDOM_SEED)),
        ]
    )


def evaluate(model, X: pd.DataFrame, y: pd.Series, name: str) -> str:
    pred = model.predict(X)
    proba = model.predict_proba(X)[:, 1]
    out = []
    out.append(f"== {name} ==")
    out.append(f"Accuracy: {accuracy_score(y, pred):.4f}")
    out.append(f"ROC AUC: {roc_auc_score(y, proba):.4f}")
    out.append("Confusion matrix (rows=true, cols=pred) labels=[0,1]:")
    out.append(str(confusion_matrix(y, pred, labels=[0, 1])))
    out.append("\nClassification report:\n" + classification_report(
        y, pred, labels=[0, 1], target_names=["low_risk", "high_risk"], zero_division=0,
    ))
    return "\n".join(out)


def train(df: pd.DataFrame, cv: int = 5):
    """
    Fit a calibrated model on a normalized frame.
    Returns (model, feature_list, report_text).
    """
    feature_list = NUMERIC_FEATURES + CATEGORICAL_FEATURES
    X = df[feature_list]
    y = df[LABEL_COL]

    X_train, X_test, y_train, y_test = train_test_split(
        X, y,
        test_size=TEST_SIZE,
        random_state=RANDOM_SEED,
        stratify=y,
    )

    # Calibrate with CV on TRAIN; the risk score is shown to users as-is
    calibrated = CalibratedClassifierCV(estimator=build_pipeline(), method="isotonic", cv=cv)
    calibrated.fit(X_train, y_train)

    report = evaluate(calibrated, X_test, y_test, "CALIBRATED (isotonic) - TEST")
    return calibrated, feature_list, report


def save_artifacts(model, feature_list: list, out_dir: Path) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    joblib.dump(model, out_dir / "diabetes_model.joblib")
    (out_dir / "feature_list.json").write_text(json.dumps(feature_list, indent=2), encoding="utf-8")


def main() -> int:
    if not IN_PATH.exists():
        raise FileNotFoundError(f"Missing input: {IN_PATH}")

    df = normalize_dataset(pd.read_csv(IN_PATH))
    print(f"Loaded {len(df)} rows; positive rate {df[LABEL_COL].mean():.3f}")

    model, feature_list, report = train(df)
    print(report)

    save_artifacts(model, feature_list, OUT_DIR)
    (OUT_DIR / "test_report.txt").write_text(report, encoding="utf-8")

    print(f"\nSaved calibrated model to: {OUT_DIR / 'diabetes_model.joblib'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
