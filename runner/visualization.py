"""
Visualization utilities for leave-one-out runs
Draws the confusion matrix of the held-out predictions
"""

import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
import seaborn as sns
from sklearn.metrics import confusion_matrix
import io
import base64
import os


def plot_to_base64(fig):
    """Convert matplotlib figure to base64 PNG string"""
    buf = io.BytesIO()
    fig.savefig(buf, format='png', bbox_inches='tight', dpi=100)
    buf.seek(0)
    img_base64 = base64.b64encode(buf.read()).decode('utf-8')
    plt.close(fig)
    return f"data:image/png;base64,{img_base64}"


def create_confusion_matrix_figure(y_true, y_pred, classes, title='Leave-One-Out Confusion Matrix'):
    """
    Build the confusion matrix heatmap

    Args:
        y_true: True labels
        y_pred: Predicted labels
        classes: Class labels, in display order
        title: Plot title

    Returns:
        matplotlib Figure
    """
    cm = confusion_matrix(y_true, y_pred, labels=classes)

    size = max(6, 0.6 * len(classes) + 4)
    fig, ax = plt.subplots(figsize=(size, size * 0.8))
    sns.heatmap(cm, annot=True, fmt='d', cmap='Blues',
                xticklabels=classes, yticklabels=classes,
                ax=ax, cbar_kws={'label': 'Count'})
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.set_ylabel('True Label', fontsize=12)
    ax.set_xlabel('Predicted Label', fontsize=12)

    return fig


def create_confusion_matrix(y_true, y_pred, classes):
    """
    Generate confusion matrix plot

    Returns:
        Base64 encoded image string
    """
    fig = create_confusion_matrix_figure(y_true, y_pred, classes)
    return plot_to_base64(fig)


def save_confusion_matrix(y_true, y_pred, classes, path):
    """
    Write the confusion matrix plot to a PNG file, creating parent directories

    Returns:
        The path written
    """
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    fig = create_confusion_matrix_figure(y_true, y_pred, classes)
    fig.savefig(path, format='png', bbox_inches='tight', dpi=100)
    plt.close(fig)
    return path
