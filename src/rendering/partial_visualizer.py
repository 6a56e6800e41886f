# =============================================================================
# PARTIAL VISUALIZER - Grafico diagnostico di un parziale su griglia di paxel
# =============================================================================

import matplotlib.pyplot as plt
import numpy as np


class PartialVisualizer:
    """
    Visualizzatore della specifica di un parziale.

    Genera una figura dove:
    - Asse X: posizione in campioni (o secondi, con time_in_seconds)
    - Pannello 1: traiettoria di frequenza, un segmento per paxel
    - Pannello 2: traiettoria di ampiezza, un segmento per paxel
    - Pannello 3 (opzionale): forma d'onda renderizzata, sottocampionata
    - Linee verticali: bordi dei paxel
    """

    def __init__(self, partial_generator, config=None):
        """
        Args:
            partial_generator: PartialGenerator già costruito
            config: dict di configurazione (opzionale)
        """
        self.generator = partial_generator
        self.specification = partial_generator.get_partial_specification()

        default_config = {
            'figsize': (12, 7),
            'time_in_seconds': False,

            # Paxel
            'frequency_color': '#984ea3',    # viola
            'amplitude_color': '#e41a1c',    # rosso
            'line_width': 1.5,
            'show_boundaries': True,
            'boundary_color': '#999999',
            'boundary_alpha': 0.4,
            'max_boundaries': 500,           # oltre, le linee sono omesse

            # Waveform
            'show_waveform': False,
            'waveform_color': 'steelblue',
            'waveform_alpha': 0.6,
            'waveform_downsample': 16,       # 1 punto ogni N campioni

            # Stile
            'label_fontsize': 8,
            'title_fontsize': 12,
        }
        self.config = {**default_config, **(config or {})}

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def plot(self):
        """
        Costruisce la figura.

        Returns:
            matplotlib.figure.Figure
        """
        cfg = self.config
        n_panels = 3 if cfg['show_waveform'] else 2
        fig, axes = plt.subplots(n_panels, 1, figsize=cfg['figsize'], sharex=True)

        ax_freq, ax_amp = axes[0], axes[1]
        self._draw_trajectory(ax_freq, 'start_frequency', 'end_frequency',
                              cfg['frequency_color'])
        ax_freq.set_ylabel('Hz', fontsize=cfg['label_fontsize'])

        self._draw_trajectory(ax_amp, 'start_amplitude', 'end_amplitude',
                              cfg['amplitude_color'])
        ax_amp.set_ylabel('amp', fontsize=cfg['label_fontsize'])
        ax_amp.set_ylim(-0.05, 1.05)

        if cfg['show_waveform']:
            self._draw_waveform(axes[2])

        for ax in axes:
            self._draw_boundaries(ax)

        unit = 's' if cfg['time_in_seconds'] else 'samples'
        axes[-1].set_xlabel(unit, fontsize=cfg['label_fontsize'])
        fig.suptitle(self._title(), fontsize=cfg['title_fontsize'])
        return fig

    # =========================================================================
    # DISEGNO
    # =========================================================================

    def _x(self, sample):
        if self.config['time_in_seconds']:
            return sample / self.generator.config.sample_rate
        return sample

    def _draw_trajectory(self, ax, start_field, end_field, color):
        for paxel in self.specification:
            x0 = self._x(paxel.start_sample)
            x1 = self._x(paxel.end_sample + 1)
            ax.plot(
                [x0, x1],
                [getattr(paxel, start_field), getattr(paxel, end_field)],
                color=color,
                linewidth=self.config['line_width'],
            )

    def _draw_boundaries(self, ax):
        cfg = self.config
        boundaries = self.specification.boundaries
        if not cfg['show_boundaries'] or len(boundaries) > cfg['max_boundaries']:
            return
        for b in boundaries:
            ax.axvline(self._x(b), color=cfg['boundary_color'],
                       alpha=cfg['boundary_alpha'], linewidth=0.5)

    def _draw_waveform(self, ax):
        cfg = self.config
        audio = self.generator.render_audio()
        if len(audio) == 0:
            return

        step = max(1, int(cfg['waveform_downsample']))
        positions = np.arange(0, len(audio), step)
        normalized = audio[::step] / float(self.generator.config.full_scale)

        ax.plot(self._x(positions), normalized, color=cfg['waveform_color'],
                alpha=cfg['waveform_alpha'], linewidth=0.5)
        ax.set_ylim(-1.05, 1.05)
        ax.set_ylabel('wave', fontsize=cfg['label_fontsize'])

    def _title(self):
        labels = ', '.join(sorted(self.generator.get_labels())) or '(no labels)'
        return (
            f"{labels} | {len(self.specification)} paxel | "
            f"{self.specification.total_duration_samples} samples"
        )
